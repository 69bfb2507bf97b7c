"""
Dr.Leak — Завантаження бази знань

Асинхронно читає статичні файли бази знань з директорії assets:

    config/cluster_rules.yaml      — правила кластерів (обов'язково)
    ontology/fact_questions.json   — банк питань (обов'язково)
    config/policy_shims.yaml       — must-ask списки перевізників (опціонально)
    config/room_priors.yaml        — priors по приміщеннях (опціонально)
    config/cluster_names.yaml      — назви кластерів для UI (опціонально)
    config/clusters.yaml           — каталог авто-кластерів (опціонально)

Помилки обов'язкових файлів прокидаються викликачу — движок
не робить повторних спроб.
"""

import asyncio
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from dr_leak.schemas.knowledge import AutoCluster, ClusterName


CLUSTER_RULES_FILE = "config/cluster_rules.yaml"
QUESTION_BANK_FILE = "ontology/fact_questions.json"
POLICY_SHIMS_FILE = "config/policy_shims.yaml"
ROOM_PRIORS_FILE = "config/room_priors.yaml"
CLUSTER_NAMES_FILE = "config/cluster_names.yaml"
AUTO_CLUSTERS_FILE = "config/clusters.yaml"


@dataclass
class KnowledgeAssets:
    """Сирі дані бази знань у пам'яті"""
    clusters: List[dict] = field(default_factory=list)
    question_bank: Dict[str, Any] = field(default_factory=dict)
    policy_shims: Dict[str, Any] = field(default_factory=dict)
    room_priors: Dict[str, Dict[str, float]] = field(default_factory=dict)
    cluster_names: Dict[str, ClusterName] = field(default_factory=dict)
    auto_clusters: List[AutoCluster] = field(default_factory=list)

    @property
    def room_types(self) -> List[str]:
        """Типи приміщень, згадані в правилах"""
        rooms = []
        for rule in self.clusters:
            rt = str(rule.get("room_type") or "").strip().upper() if isinstance(rule, dict) else ""
            if rt and rt not in rooms:
                rooms.append(rt)
        return sorted(rooms)


def _read_text(path: Path) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


class KnowledgeBaseLoader:
    """
    Асинхронний завантажувач бази знань.

    Приклад:
        loader = KnowledgeBaseLoader("engine_assets", verbose=True)
        assets = await loader.load_all()

        engine = TriageEngine(EngineConfig(room="BATHROOM"))
        await engine.initialize(
            assets.clusters, assets.question_bank,
            policy_shims=assets.policy_shims,
            room_priors=assets.room_priors,
        )
    """

    def __init__(self, assets_dir: Union[str, Path], verbose: bool = False):
        self.assets_dir = Path(assets_dir)
        self.verbose = verbose

    async def _read(self, relative: str, required: bool) -> Optional[str]:
        path = self.assets_dir / relative
        if not path.exists():
            if required:
                raise FileNotFoundError(f"Asset not found: {path}")
            if self.verbose:
                print(f"   ⚠️ {relative} не знайдено, пропускаємо")
            return None
        return await asyncio.to_thread(_read_text, path)

    async def _read_yaml(self, relative: str, required: bool = False) -> Any:
        text = await self._read(relative, required)
        if text is None:
            return None
        return yaml.safe_load(text)

    async def load_cluster_rules(self) -> List[dict]:
        data = await self._read_yaml(CLUSTER_RULES_FILE, required=True)
        if not isinstance(data, list):
            raise ValueError(f"{CLUSTER_RULES_FILE} must be a list")
        if self.verbose:
            print(f"   ✅ Cluster rules: {len(data)}")
        return data

    async def load_question_bank(self) -> Dict[str, Any]:
        text = await self._read(QUESTION_BANK_FILE, required=True)
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"{QUESTION_BANK_FILE} must be an object")
        if self.verbose:
            n = len(data.get("questions", data))
            print(f"   ✅ Question bank: {n} questions")
        return data

    async def load_policy_shims(self) -> Dict[str, Any]:
        data = await self._read_yaml(POLICY_SHIMS_FILE)
        if not isinstance(data, dict):
            return {}
        if self.verbose:
            print(f"   ✅ Policy shims: {len(data)} carriers")
        return data

    async def load_room_priors(self) -> Dict[str, Dict[str, float]]:
        data = await self._read_yaml(ROOM_PRIORS_FILE)
        if not isinstance(data, dict):
            return {}
        if self.verbose:
            print(f"   ✅ Room priors: {len(data)} rooms")
        return data

    async def load_cluster_names(self) -> Dict[str, ClusterName]:
        data = await self._read_yaml(CLUSTER_NAMES_FILE)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"{CLUSTER_NAMES_FILE} must be a mapping")

        names = {}
        for cluster_id, value in data.items():
            if isinstance(value, dict):
                names[str(cluster_id)] = ClusterName(
                    name=str(value.get("name") or cluster_id),
                    summary=str(value["summary"]) if value.get("summary") else None,
                )
        return names

    async def load_auto_clusters(self) -> List[AutoCluster]:
        data = await self._read_yaml(AUTO_CLUSTERS_FILE)
        if data is None:
            return []
        if not isinstance(data, list):
            raise ValueError(f"{AUTO_CLUSTERS_FILE} must be a list")
        return [
            AutoCluster.model_validate(row)
            for row in data
            if isinstance(row, dict) and row.get("cluster_id") is not None
        ]

    async def load_all(self) -> KnowledgeAssets:
        """Завантажити всі файли паралельно"""
        if self.verbose:
            print(f"📦 Завантаження бази знань з {self.assets_dir}...")

        (
            clusters,
            question_bank,
            policy_shims,
            room_priors,
            cluster_names,
            auto_clusters,
        ) = await asyncio.gather(
            self.load_cluster_rules(),
            self.load_question_bank(),
            self.load_policy_shims(),
            self.load_room_priors(),
            self.load_cluster_names(),
            self.load_auto_clusters(),
        )

        return KnowledgeAssets(
            clusters=clusters,
            question_bank=question_bank,
            policy_shims=policy_shims,
            room_priors=room_priors,
            cluster_names=cluster_names,
            auto_clusters=auto_clusters,
        )

    def __repr__(self) -> str:
        return f"KnowledgeBaseLoader(assets_dir='{self.assets_dir}')"
