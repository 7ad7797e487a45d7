from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

from loguru import logger

from quick_capture.capture_parsing import normalize_names
from quick_capture.domain.models import (
    AnalysisResult,
    EntityRef,
    MarkerType,
    Project,
    ProvisioningIssue,
    ProvisioningResult,
    Tag,
)


class TagRepository(Protocol):
    async def list_tags(self) -> Sequence[Tag]: ...

    async def create_tag(self, name: str) -> Tag: ...


class ProjectRepository(Protocol):
    async def list_projects(self) -> Sequence[Project]: ...

    async def create_project(self, name: str) -> Project: ...


@dataclass(frozen=True)
class ExistingEntities:
    tags: tuple[Tag, ...] = ()
    projects: tuple[Project, ...] = ()

    def find(self, kind: MarkerType, name: str) -> Tag | Project | None:
        pool: tuple[Tag | Project, ...] = self.tags if kind == MarkerType.tag else self.projects
        key = name.casefold()
        for entity in pool:
            if entity.name.casefold() == key:
                return entity
        return None


CreateEntity = Callable[[str], Awaitable[Tag | Project]]


async def ensure_entities(
    tags: Sequence[str],
    projects: Sequence[str],
    *,
    existing: ExistingEntities,
    create_tag: CreateEntity,
    create_project: CreateEntity,
) -> ProvisioningResult:
    """Resolve every referenced name to an entity, creating the missing ones.

    Creation failures are logged and reported in ``errors``; they never abort
    the other names.
    """
    tag_refs, tag_errors = await _ensure_kind(MarkerType.tag, normalize_names(tags), existing, create_tag)
    project_refs, project_errors = await _ensure_kind(
        MarkerType.project,
        normalize_names(projects),
        existing,
        create_project,
    )
    return ProvisioningResult(
        tag_refs=tag_refs,
        project_refs=project_refs,
        errors=[*tag_errors, *project_errors],
    )


async def provision_capture(
    result: AnalysisResult,
    *,
    tag_repository: TagRepository,
    project_repository: ProjectRepository,
) -> ProvisioningResult:
    existing_tags, existing_projects = await asyncio.gather(
        tag_repository.list_tags(),
        project_repository.list_projects(),
    )
    return await ensure_entities(
        result.parsed_tags,
        result.parsed_projects,
        existing=ExistingEntities(tags=tuple(existing_tags), projects=tuple(existing_projects)),
        create_tag=tag_repository.create_tag,
        create_project=project_repository.create_project,
    )


async def _ensure_kind(
    kind: MarkerType,
    names: list[str],
    existing: ExistingEntities,
    create: CreateEntity,
) -> tuple[list[EntityRef], list[ProvisioningIssue]]:
    refs: dict[str, EntityRef] = {}
    missing: list[str] = []
    for name in names:
        found = existing.find(kind, name)
        if found is None:
            missing.append(name)
        else:
            refs[name] = EntityRef(kind=kind, name=found.name, uid=found.uid)

    outcomes = await asyncio.gather(*(create(name) for name in missing), return_exceptions=True)
    errors: list[ProvisioningIssue] = []
    for name, outcome in zip(missing, outcomes, strict=True):
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            logger.warning(f"Failed to create {kind.value} {name!r}: {outcome}")
            errors.append(ProvisioningIssue(kind=kind, name=name, message=str(outcome) or type(outcome).__name__))
            continue
        logger.debug(f"Created {kind.value} {outcome.name!r}")
        refs[name] = EntityRef(kind=kind, name=outcome.name, uid=outcome.uid, created=True)

    ordered = [refs[name] for name in names if name in refs]
    return ordered, errors
