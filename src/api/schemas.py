"""API request/response schemas."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from src.core.dialogue.conditions import ConversationState
from src.core.generation.enums import Gender, TimeOfDay
from src.core.generation.models import TargetRef
from src.core.generation.quest_generator import QuestGiver
from src.core.generation.schemas import GenerationContext
from src.core.quest.enums import QuestStatus
from src.core.quest.models import ActiveQuest
from src.core.quest.state_machine import PlayerSnapshot


# === 공통 ===


class ErrorResponse(BaseModel):
    """에러 응답"""

    detail: str


class HealthResponse(BaseModel):
    status: str
    templates: dict[str, int] = {}


class GenerationContextSchema(BaseModel):
    """생성 컨텍스트. world_seed가 없으면 서버 기본 시드."""

    world_seed: Optional[int] = None
    region_id: Optional[str] = None
    location_id: Optional[str] = None
    region_name: Optional[str] = None
    location_name: Optional[str] = None
    player_level: int = Field(default=1, ge=1, le=10)
    game_hour: float = Field(default=12.0, ge=0.0, le=24.0)
    faction_tensions: dict[str, float] = {}
    active_events: list[str] = []
    context_tags: list[str] = []

    def to_context(self, default_seed: int) -> GenerationContext:
        data = self.model_dump()
        if data["world_seed"] is None:
            data["world_seed"] = default_seed
        return GenerationContext.model_validate(data)


class TargetRefSchema(BaseModel):
    id: str
    name: str
    tags: list[str] = []

    def to_target(self) -> TargetRef:
        return TargetRef(id=self.id, name=self.name, tags=list(self.tags))


class QuestGiverSchema(BaseModel):
    id: str
    name: str
    role: Optional[str] = None
    faction: Optional[str] = None

    def to_giver(self) -> QuestGiver:
        return QuestGiver(id=self.id, name=self.name, role=self.role, faction=self.faction)


# === 생성 요청 ===


class GenerateRequest(BaseModel):
    """key: 스트림 키. seed = combine_seeds(world_seed, key)"""

    context: GenerationContextSchema = GenerationContextSchema()
    key: str = Field(..., min_length=1, description="스트림 키")


class GenerateNPCRequest(GenerateRequest):
    template_id: Optional[str] = None
    location_type: Optional[str] = None
    faction: Optional[str] = None
    biome: Optional[str] = None
    gender: Optional[Gender] = None


class GenerateQuestRequest(GenerateRequest):
    template_id: Optional[str] = None
    giver: Optional[QuestGiverSchema] = None
    location_type: Optional[str] = None
    available_npcs: list[TargetRefSchema] = []
    available_items: list[TargetRefSchema] = []
    available_locations: list[TargetRefSchema] = []
    available_enemies: list[TargetRefSchema] = []


class GenerateEncounterRequest(GenerateRequest):
    biome: Optional[str] = None
    location_type: Optional[str] = None
    time_of_day: Optional[TimeOfDay] = None
    min_difficulty: int = Field(default=1, ge=1, le=10)
    max_difficulty: int = Field(default=10, ge=1, le=10)


class GenerateDialogueRequest(GenerateRequest):
    npc_template_id: Optional[str] = None
    location_type: Optional[str] = None
    quest_id: Optional[str] = None
    simple: bool = False


class GenerateLocationRequest(GenerateRequest):
    location_type: str
    region_id: Optional[str] = None


class GenerateResponse(BaseModel):
    """generated=False면 조건에 맞는 템플릿이 없음 (오류 아님)"""

    generated: bool
    seed: Optional[int] = None
    result: Optional[dict[str, Any]] = None


# === 대화 ===


class ConversationStateSchema(BaseModel):
    npc_id: Optional[str] = None
    game_hour: float = Field(default=12.0, ge=0.0, le=24.0)
    active_quests: list[str] = []
    completed_quests: list[str] = []
    inventory: dict[str, int] = {}
    reputation: int = 0
    faction_reputation: dict[str, int] = {}
    gold: int = 0
    talked_to: list[str] = []
    flags: list[str] = []

    def to_state(self) -> ConversationState:
        return ConversationState(
            npc_id=self.npc_id,
            game_hour=self.game_hour,
            active_quests=set(self.active_quests),
            completed_quests=set(self.completed_quests),
            inventory=dict(self.inventory),
            reputation=self.reputation,
            faction_reputation=dict(self.faction_reputation),
            gold=self.gold,
            talked_to=set(self.talked_to),
            flags=set(self.flags),
        )


class DialogueStartRequest(BaseModel):
    """tree_id(저작 트리) 또는 tree(트리 원본) 중 하나"""

    tree_id: Optional[str] = None
    tree: Optional[dict[str, Any]] = None
    state: ConversationStateSchema = ConversationStateSchema()


class DialogueChooseRequest(DialogueStartRequest):
    node_id: str
    choice_index: int = Field(..., ge=0)


class ChoiceInfo(BaseModel):
    index: int
    text: str
    hint: Optional[str] = None
    tags: list[str] = []


class DialogueStepResponse(BaseModel):
    tree_id: str
    ended: bool
    node_id: Optional[str] = None
    speaker: Optional[str] = None
    text: Optional[str] = None
    choices: list[ChoiceInfo] = []
    effects: list[dict[str, Any]] = []
    can_auto_advance: bool = False


# === 퀘스트 ===


class PlayerSnapshotSchema(BaseModel):
    level: int = Field(default=1, ge=1)
    completed_quests: list[str] = []
    faction_reputation: dict[str, int] = {}
    inventory: dict[str, int] = {}

    def to_snapshot(self) -> PlayerSnapshot:
        return PlayerSnapshot(
            level=self.level,
            completed_quests=set(self.completed_quests),
            faction_reputation=dict(self.faction_reputation),
            inventory=dict(self.inventory),
        )


class QuestRefRequest(BaseModel):
    """quest_id(저작 퀘스트) 또는 quest(정의 원본) 중 하나"""

    quest_id: Optional[str] = None
    quest: Optional[dict[str, Any]] = None


class PrerequisiteRequest(QuestRefRequest):
    player: PlayerSnapshotSchema = PlayerSnapshotSchema()


class PrerequisiteResponse(BaseModel):
    quest_id: str
    met: bool
    failures: list[str] = []


class ActiveQuestSchema(BaseModel):
    quest_id: str
    status: QuestStatus = QuestStatus.ACTIVE
    current_stage_index: int = Field(default=0, ge=0)
    objective_progress: dict[str, int] = {}
    started_at: float = 0.0
    completed_at: Optional[float] = None
    time_remaining_hours: Optional[float] = None

    def to_active(self) -> ActiveQuest:
        return ActiveQuest(**self.model_dump())

    @classmethod
    def from_active(cls, active: ActiveQuest) -> "ActiveQuestSchema":
        return cls(
            quest_id=active.quest_id,
            status=active.status,
            current_stage_index=active.current_stage_index,
            objective_progress=dict(active.objective_progress),
            started_at=active.started_at,
            completed_at=active.completed_at,
            time_remaining_hours=active.time_remaining_hours,
        )


class QuestProgressRequest(QuestRefRequest):
    active: ActiveQuestSchema
    objective_id: str
    amount: int = 1
    now: float = 0.0


class QuestProgressResponse(BaseModel):
    changed: bool
    stage_completed: bool
    quest_completed: bool
    active: ActiveQuestSchema
    next_stage_id: Optional[str] = None
    rewards: list[dict[str, Any]] = []
    messages: list[str] = []


# === 가격 ===


class PriceQuoteRequest(BaseModel):
    base_price: int = Field(..., ge=0)
    item_tags: list[str] = []
    location_type: Optional[str] = None
    region: Optional[str] = None
    active_events: list[str] = []
    season: Optional[str] = None
    faction_tensions: dict[str, float] = {}
    population: float = 100
    danger_level: float = 1
    features: list[str] = []
    seed: Optional[int] = Field(default=None, description="없으면 중간값 배율")
    shop_modifier: float = Field(default=1.0, gt=0.0)


class AppliedModifierInfo(BaseModel):
    modifier_id: str
    multiplier: float


class PriceQuoteResponse(BaseModel):
    base_price: int
    final_price: int
    multiplier: float
    applied: list[AppliedModifierInfo] = []
