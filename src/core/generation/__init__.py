"""절차 생성 Core 패키지

공개 API:
- 컨텍스트/템플릿: GenerationContext, NPCTemplate, QuestTemplate, ... (schemas)
- 라이브러리: TemplateLibrary, load_content_pack, library_from_dicts
- 생성기: 이름, NPC, 퀘스트, 조우, 대화, 월드
- ProceduralWorld: 호출자 소유 장소 콘텐츠 캐시
"""

from src.core.generation.enums import (
    Gender,
    LocationSize,
    NameOrigin,
    NodeRole,
    QuestArchetype,
    SnippetCategory,
    TargetType,
    TimeOfDay,
)
from src.core.generation.schemas import (
    GENERATION_SCHEMA_VERSION,
    PERSONALITY_TRAITS,
    BuildingTemplate,
    DialogueSnippet,
    DialogueTreeTemplate,
    EncounterTemplate,
    EnemyTemplate,
    GenerationContext,
    LocationTemplate,
    NamePool,
    NPCTemplate,
    PlaceNamePool,
    QuestTemplate,
)
from src.core.generation.templating import (
    extract_template_variables,
    is_night,
    substitute_template,
    time_of_day,
)
from src.core.generation.selection import matches_filter, select_weighted
from src.core.generation.models import (
    GeneratedEncounter,
    GeneratedEnemy,
    GeneratedLocation,
    GeneratedName,
    GeneratedNPC,
    GeneratedPlaceName,
    GeneratedQuest,
    GeneratedRegion,
    GeneratedWorld,
    GenerationManifest,
    LocationContent,
    Personality,
    TargetRef,
)
from src.core.generation.library import (
    LoadReport,
    TemplateLibrary,
    library_from_dicts,
    load_content_pack,
)
from src.core.generation.naming import (
    generate_automaton_designation,
    generate_name,
    generate_name_weighted,
    generate_outlaw_alias,
    generate_place_name,
    generate_place_names,
    generate_unique_name,
)
from src.core.generation.npc_generator import (
    generate_npc,
    generate_npcs_for_building,
    generate_npcs_for_location,
    select_npc_template,
)
from src.core.generation.quest_generator import (
    QuestGenerationContext,
    QuestGiver,
    generate_quest,
    generate_random_quest,
    select_quest_template,
)
from src.core.generation.encounter_generator import (
    encounter_chance,
    generate_encounter,
    generate_enemy,
    generate_random_encounter,
    select_encounter_template,
    should_trigger_encounter,
)
from src.core.generation.dialogue_generator import (
    build_dialogue_tree,
    generate_dialogue_for_npc,
    generate_simple_dialogue_tree,
    snippets_for_npc,
)
from src.core.generation.world_generator import WorldGenerator
from src.core.generation.procedural_world import ProceduralWorld

__all__ = [
    "Gender",
    "LocationSize",
    "NameOrigin",
    "NodeRole",
    "QuestArchetype",
    "SnippetCategory",
    "TargetType",
    "TimeOfDay",
    "GENERATION_SCHEMA_VERSION",
    "PERSONALITY_TRAITS",
    "BuildingTemplate",
    "DialogueSnippet",
    "DialogueTreeTemplate",
    "EncounterTemplate",
    "EnemyTemplate",
    "GenerationContext",
    "LocationTemplate",
    "NamePool",
    "NPCTemplate",
    "PlaceNamePool",
    "QuestTemplate",
    "extract_template_variables",
    "is_night",
    "substitute_template",
    "time_of_day",
    "matches_filter",
    "select_weighted",
    "GeneratedEncounter",
    "GeneratedEnemy",
    "GeneratedLocation",
    "GeneratedName",
    "GeneratedNPC",
    "GeneratedPlaceName",
    "GeneratedQuest",
    "GeneratedRegion",
    "GeneratedWorld",
    "GenerationManifest",
    "LocationContent",
    "Personality",
    "TargetRef",
    "LoadReport",
    "TemplateLibrary",
    "library_from_dicts",
    "load_content_pack",
    "generate_automaton_designation",
    "generate_name",
    "generate_name_weighted",
    "generate_outlaw_alias",
    "generate_place_name",
    "generate_place_names",
    "generate_unique_name",
    "generate_npc",
    "generate_npcs_for_building",
    "generate_npcs_for_location",
    "select_npc_template",
    "QuestGenerationContext",
    "QuestGiver",
    "generate_quest",
    "generate_random_quest",
    "select_quest_template",
    "encounter_chance",
    "generate_encounter",
    "generate_enemy",
    "generate_random_encounter",
    "select_encounter_template",
    "should_trigger_encounter",
    "build_dialogue_tree",
    "generate_dialogue_for_npc",
    "generate_simple_dialogue_tree",
    "snippets_for_npc",
    "WorldGenerator",
    "ProceduralWorld",
]
