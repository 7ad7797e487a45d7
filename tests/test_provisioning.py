from __future__ import annotations

import asyncio
from collections.abc import Sequence

from quick_capture.domain.models import AnalysisResult, MarkerType, Project, Tag
from quick_capture.provisioning import ExistingEntities, ensure_entities, provision_capture


class FakeTagRepository:
    def __init__(self, tags: Sequence[Tag] = (), *, failing: frozenset[str] = frozenset()) -> None:
        self.tags = list(tags)
        self.failing = failing
        self.created: list[str] = []

    async def list_tags(self) -> Sequence[Tag]:
        return list(self.tags)

    async def create_tag(self, name: str) -> Tag:
        await asyncio.sleep(0)
        if name in self.failing:
            raise RuntimeError(f"cannot create {name}")
        self.created.append(name)
        tag = Tag(uid=f"tag-{len(self.tags) + 1}", name=name)
        self.tags.append(tag)
        return tag


class FakeProjectRepository:
    def __init__(self, projects: Sequence[Project] = ()) -> None:
        self.projects = list(projects)
        self.created: list[str] = []

    async def list_projects(self) -> Sequence[Project]:
        return list(self.projects)

    async def create_project(self, name: str) -> Project:
        await asyncio.sleep(0)
        self.created.append(name)
        project = Project(uid=f"project-{len(self.projects) + 1}", name=name)
        self.projects.append(project)
        return project


def test_existing_entities_are_reused_case_insensitively() -> None:
    tags = FakeTagRepository([Tag(uid="t1", name="Work")])
    projects = FakeProjectRepository([Project(uid="p1", name="Health")])

    result = asyncio.run(
        ensure_entities(
            ["work"],
            ["health"],
            existing=ExistingEntities(tags=tuple(tags.tags), projects=tuple(projects.projects)),
            create_tag=tags.create_tag,
            create_project=projects.create_project,
        ),
    )

    assert result.ok
    assert [(ref.name, ref.uid, ref.created) for ref in result.tag_refs] == [("Work", "t1", False)]
    assert [(ref.name, ref.uid, ref.created) for ref in result.project_refs] == [("Health", "p1", False)]
    assert tags.created == []
    assert projects.created == []


def test_each_missing_name_is_created_once() -> None:
    tags = FakeTagRepository()
    projects = FakeProjectRepository()

    result = asyncio.run(
        ensure_entities(
            ["errand", "Errand", "home"],
            ["Big Shop", "big shop"],
            existing=ExistingEntities(),
            create_tag=tags.create_tag,
            create_project=projects.create_project,
        ),
    )

    assert sorted(tags.created) == ["errand", "home"]
    assert projects.created == ["Big Shop"]
    assert [ref.name for ref in result.tag_refs] == ["errand", "home"]
    assert all(ref.created for ref in result.tag_refs)
    assert result.project_refs[0].kind == MarkerType.project


def test_failed_create_is_recorded_and_others_continue() -> None:
    tags = FakeTagRepository(failing=frozenset({"broken"}))
    projects = FakeProjectRepository()

    result = asyncio.run(
        ensure_entities(
            ["broken", "fine"],
            ["Garden"],
            existing=ExistingEntities(),
            create_tag=tags.create_tag,
            create_project=projects.create_project,
        ),
    )

    assert not result.ok
    assert [(issue.kind, issue.name) for issue in result.errors] == [(MarkerType.tag, "broken")]
    assert "cannot create broken" in result.errors[0].message
    assert [ref.name for ref in result.tag_refs] == ["fine"]
    assert [ref.name for ref in result.project_refs] == ["Garden"]


def test_provision_capture_uses_repositories() -> None:
    tags = FakeTagRepository([Tag(uid="t1", name="bookmark")])
    projects = FakeProjectRepository()
    analysis = AnalysisResult(
        parsed_tags=["Bookmark", "reading"],
        parsed_projects=["Research"],
        cleaned_content="https://example.com",
    )

    result = asyncio.run(provision_capture(analysis, tag_repository=tags, project_repository=projects))

    assert [(ref.name, ref.created) for ref in result.tag_refs] == [("bookmark", False), ("reading", True)]
    assert [ref.uid for ref in result.project_refs] == ["project-1"]
    assert tags.created == ["reading"]
