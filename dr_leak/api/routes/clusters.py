"""
Dr.Leak — Clusters Routes

Довідник кластерів пошкоджень для UI.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from dr_leak.knowledge_base import KnowledgeBase

from ..dependencies import require_knowledge, KnowledgeManager
from ..models import ClusterInfo, ClusterListResponse

router = APIRouter(prefix="/clusters", tags=["Clusters"])


@router.get("", response_model=ClusterListResponse)
async def list_clusters(
    room: Optional[str] = None,
    knowledge: KnowledgeManager = Depends(require_knowledge)
) -> ClusterListResponse:
    """
    Кластери, які бачить сесія для приміщення.

    Без **room** — всі розрізнювані кластери бази знань.
    """
    assets = knowledge.assets
    kb = KnowledgeBase.build(assets.clusters, assets.question_bank, room=room or "")
    catalog = {entry.cluster_id: entry for entry in assets.auto_clusters}

    clusters = []
    for cid in kb.cluster_ids:
        info = assets.cluster_names.get(cid)
        auto = catalog.get(cid)
        clusters.append(ClusterInfo(
            cluster_id=cid,
            name=info.name if info else cid,
            summary=info.summary if info else None,
            room_type=kb.get_rule(cid).room_type,
            description=auto.description if auto else None,
            core_item_codes=list(auto.core_item_codes) if auto else [],
        ))

    return ClusterListResponse(
        room=room,
        clusters=clusters,
        total=len(clusters),
    )
