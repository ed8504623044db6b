from typing import Callable

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from saligo.ai.cache import CacheStats
from saligo.ai.orchestrator import AIOrchestrator
from saligo.api.schemas import (
    ClusterResponse,
    ClustersRequest,
    ExpansionsRequest,
    FindCentersRequest,
    MOCDiscoveryRequest,
    MOCRequest,
    RelationshipsRequest,
    SeedDiscoveryRequest,
    TagsRequest,
    TagsResponse,
    TagSummary,
    UnityRequest,
    WholenessRequest,
)
from saligo.discovery.coordinator import CenterDiscoveryCoordinator
from saligo.domain.centers import (
    CenterDiscoveryResult,
    ExpansionPrompt,
    TextCenter,
    UnityCheck,
    WholenessAnalysis,
)
from saligo.domain.moc import MOCValidationResult
from saligo.domain.relationships import NoteRelationships
from saligo.graph import (
    ClusterFinder,
    RelationshipGraphBuilder,
    TagCoOccurrenceIndex,
    filter_by_tags,
    format_date_range,
)
from saligo.vault.memory import InMemoryVault

Verifier = Callable[..., str]


def _coordinator_for(orchestrator: AIOrchestrator, vault: InMemoryVault) -> CenterDiscoveryCoordinator:
    return CenterDiscoveryCoordinator(orchestrator, reader=vault, resolver=vault)


def _create_seed_discovery_endpoint(orchestrator: AIOrchestrator, verify: Verifier):
    """Create the seed discovery endpoint handler."""

    async def discover_from_seeds(
        body: SeedDiscoveryRequest, _: str = Depends(verify)
    ) -> CenterDiscoveryResult:
        vault = InMemoryVault(body.notes)
        return await _coordinator_for(orchestrator, vault).discover_from_seeds(vault.notes)

    return discover_from_seeds


def _create_moc_discovery_endpoint(orchestrator: AIOrchestrator, verify: Verifier):
    """Create the MOC discovery endpoint handler."""

    async def discover_from_moc(
        body: MOCDiscoveryRequest, _: str = Depends(verify)
    ) -> CenterDiscoveryResult:
        vault = InMemoryVault(body.notes)
        return await _coordinator_for(orchestrator, vault).discover_from_moc(
            body.moc_id, min_centers=body.min_centers, max_centers=body.max_centers
        )

    return discover_from_moc


def _create_moc_validation_endpoint(orchestrator: AIOrchestrator, verify: Verifier):
    """Create the MOC validation endpoint handler."""

    async def validate_moc(body: MOCRequest, _: str = Depends(verify)) -> MOCValidationResult:
        vault = InMemoryVault(body.notes)
        return await _coordinator_for(orchestrator, vault).validate_moc(body.moc_id)

    return validate_moc


def _create_relationships_endpoint(verify: Verifier):
    """Create the relationship graph endpoint handler."""

    async def relationships(
        body: RelationshipsRequest, _: str = Depends(verify)
    ) -> list[NoteRelationships]:
        notes = InMemoryVault(body.notes).notes
        builder = RelationshipGraphBuilder()
        if body.note_id is None:
            return list(builder.detect_relationships_batch(notes).values())

        source = next((note for note in notes if note.id == body.note_id), None)
        if source is None:
            logger.warning(f"Relationships requested for unknown note {body.note_id}")
            raise HTTPException(status_code=404, detail="Note not found")
        return [builder.detect_relationships(source, notes)]

    return relationships


def _create_clusters_endpoint(verify: Verifier):
    """Create the clusters endpoint handler."""

    async def clusters(body: ClustersRequest, _: str = Depends(verify)) -> list[ClusterResponse]:
        notes = InMemoryVault(body.notes).notes
        found = ClusterFinder().find_clusters(notes, min_strength=body.min_strength)
        return [ClusterResponse(note_ids=cluster.note_ids, size=len(cluster)) for cluster in found]

    return clusters


def _create_tags_endpoint(verify: Verifier):
    """Create the tag statistics endpoint handler."""

    async def tags(body: TagsRequest, _: str = Depends(verify)) -> TagsResponse:
        index = TagCoOccurrenceIndex.from_notes(body.notes)
        matching = filter_by_tags(body.notes, body.tags, body.mode) if body.tags else []
        return TagsResponse(
            tags=[
                TagSummary(
                    tag=stats.tag,
                    count=stats.count,
                    note_ids=stats.note_ids,
                    related=index.get_related_tags(stats),
                    date_range=format_date_range(stats.date_range),
                )
                for stats in index.stats
            ],
            suggested_combinations=index.get_suggested_combinations(body.min_co_occurrence),
            matching_note_ids=[note.id for note in matching],
        )

    return tags


def get_endpoints_router(*, orchestrator: AIOrchestrator, verify: Verifier) -> APIRouter:
    router = APIRouter()

    @router.get("/health")
    async def health_check():
        return {"status": "healthy"}

    router.post("/api/centers/seeds")(_create_seed_discovery_endpoint(orchestrator, verify))
    router.post("/api/centers/moc")(_create_moc_discovery_endpoint(orchestrator, verify))
    router.post("/api/centers/moc/validate")(_create_moc_validation_endpoint(orchestrator, verify))
    router.post("/api/relationships")(_create_relationships_endpoint(verify))
    router.post("/api/clusters")(_create_clusters_endpoint(verify))
    router.post("/api/tags")(_create_tags_endpoint(verify))

    @router.post("/api/text/centers")
    async def find_centers(body: FindCentersRequest, _: str = Depends(verify)) -> list[TextCenter]:
        return await orchestrator.find_centers(body.text, body.context)

    @router.post("/api/text/expansions")
    async def suggest_expansions(
        body: ExpansionsRequest, _: str = Depends(verify)
    ) -> list[ExpansionPrompt]:
        return await orchestrator.suggest_expansions(body.center, body.document_context)

    @router.post("/api/text/wholeness")
    async def analyze_wholeness(
        body: WholenessRequest, _: str = Depends(verify)
    ) -> WholenessAnalysis:
        return await orchestrator.analyze_wholeness(body.document)

    @router.post("/api/text/unity")
    async def check_unity(body: UnityRequest, _: str = Depends(verify)) -> UnityCheck:
        return await orchestrator.check_paragraph_unity(body.paragraph)

    @router.get("/api/cache/stats")
    async def cache_stats(_: str = Depends(verify)) -> CacheStats:
        return orchestrator.cache_stats()

    @router.delete("/api/cache")
    async def clear_cache(_: str = Depends(verify)):
        orchestrator.clear_cache()
        return {"status": "cleared"}

    return router
