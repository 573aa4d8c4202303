"""절차 생성 관련 열거형"""

from enum import Enum


class NameOrigin(str, Enum):
    FRONTIER_ANGLO = "frontier_anglo"
    FRONTIER_HISPANIC = "frontier_hispanic"
    FRONTIER_NATIVE = "frontier_native"
    FRONTIER_CHINESE = "frontier_chinese"
    FRONTIER_EUROPEAN = "frontier_european"
    OUTLAW = "outlaw"
    MECHANICAL = "mechanical"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    NEUTRAL = "neutral"


class TimeOfDay(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"


class TargetType(str, Enum):
    NPC = "npc"
    ITEM = "item"
    LOCATION = "location"
    ENEMY = "enemy"
    ANY = "any"


class QuestArchetype(str, Enum):
    # 전투
    BOUNTY_HUNT = "bounty_hunt"
    CLEAR_AREA = "clear_area"
    ESCORT = "escort"
    AMBUSH = "ambush"
    # 획득
    FETCH_ITEM = "fetch_item"
    STEAL_ITEM = "steal_item"
    RECOVER_LOST = "recover_lost"
    GATHER_MATERIALS = "gather_materials"
    # 배달
    DELIVER_MESSAGE = "deliver_message"
    DELIVER_PACKAGE = "deliver_package"
    SMUGGLE = "smuggle"
    # 조사
    FIND_PERSON = "find_person"
    INVESTIGATE = "investigate"
    SPY = "spy"
    # 사회
    CONVINCE_NPC = "convince_npc"
    INTIMIDATE = "intimidate"
    MEDIATE = "mediate"
    # 탐험
    EXPLORE_LOCATION = "explore_location"
    MAP_AREA = "map_area"
    FIND_ROUTE = "find_route"
    # 경제
    DEBT_COLLECTION = "debt_collection"
    INVESTMENT = "investment"
    TRADE_ROUTE = "trade_route"


class SnippetCategory(str, Enum):
    GREETING = "greeting"
    FAREWELL = "farewell"
    THANKS = "thanks"
    REFUSAL = "refusal"
    AGREEMENT = "agreement"
    QUESTION = "question"
    RUMOR = "rumor"
    THREAT = "threat"
    BRIBE = "bribe"
    COMPLIMENT = "compliment"
    INSULT = "insult"
    SMALL_TALK = "small_talk"
    QUEST_OFFER = "quest_offer"
    QUEST_UPDATE = "quest_update"
    QUEST_COMPLETE = "quest_complete"
    SHOP_WELCOME = "shop_welcome"
    SHOP_BROWSE = "shop_browse"
    SHOP_BUY = "shop_buy"
    SHOP_SELL = "shop_sell"
    SHOP_FAREWELL = "shop_farewell"


class NodeRole(str, Enum):
    GREETING = "greeting"
    MAIN = "main"
    BRANCH = "branch"
    FAREWELL = "farewell"
    QUEST = "quest"
    SHOP = "shop"
    RUMOR = "rumor"


class LocationSize(str, Enum):
    TINY = "tiny"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    HUGE = "huge"
