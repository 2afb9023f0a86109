"""
Persona and canned responses for the Saratov Quest assistant (ВОЛГА)
"""

from typing import List, Tuple

from src.core.enums import AssistantTopic

# ============================================================================
# SYSTEM PROMPT
# ============================================================================

VOLGA_SYSTEM_PROMPT = """Ты - ВОЛГА (Виртуальный Организатор Локальных Городских Активностей), AI-ассистент туристической платформы "Саратов Quest".

Твоя роль:
- Помогать туристам и жителям исследовать Саратов
- Рекомендовать интересные места, рестораны, развлечения
- Составлять персональные маршруты
- Давать советы по бюджету и времени
- Отвечать на любые вопросы о городе

Стиль общения:
- Дружелюбный и энтузиастичный
- Используй эмодзи для живости
- Давай конкретные рекомендации с адресами
- Учитывай бюджет и предпочтения пользователя
- Всегда предлагай несколько вариантов

Знания о Саратове:
- Исторические достопримечательности: Радищевский музей, Консерватория им. Собинова, особняки на проспекте Кирова
- Природные места: Парк Липки, Набережная Космонавтов, Соколовая гора, Волга
- Рестораны: от бюджетных кафе до премиум-заведений
- Развлечения: театры, музеи, парки, торговые центры
- Транспорт: трамваи, автобусы, такси

Отвечай на русском языке, будь полезным и вдохновляющим!"""

USER_CONTEXT_TEMPLATE = (
    "Пользователь: {username}, уровень: {level}, {tier} пользователь, очки: {points}"
)

GUEST_USERNAME = "Гость"


# ============================================================================
# LOCAL RESPONDER
# ============================================================================

GREETING_RESPONSES: List[str] = [
    "Привет! Я Волга, ваш виртуальный помощник по Саратову! Готов помочь вам исследовать наш прекрасный город. Что вас интересует?",
    "Добро пожаловать в Саратов! Меня зовут Волга, и я знаю все самые интересные места города. Чем могу помочь?",
    "Здравствуйте! Волга на связи. Расскажу вам о лучших местах Саратова и помогу составить маршрут. О чем хотите узнать?",
]

FOOD_RESPONSES: List[str] = [
    "В Саратове много отличных ресторанов! Рекомендую попробовать местную кухню в ресторане 'Волжский берег' или современную европейскую в 'Гастрономе'. А какую кухню предпочитаете?",
    "Для романтического ужина советую ресторан с видом на Волгу. Если хотите что-то более демократичное - множество уютных кафе в центре города. Какой у вас бюджет?",
    "Саратов славится своими рыбными блюдами! Обязательно попробуйте волжскую стерлядь. Могу порекомендовать несколько мест, где её готовят особенно вкусно.",
]

ATTRACTION_RESPONSES: List[str] = [
    "Главные достопримечательности Саратова: Парк Липки, Набережная Космонавтов, Саратовская консерватория и Радищевский музей. Что вас больше интересует - история, культура или природа?",
    "Обязательно посетите смотровую площадку на Соколовой горе - оттуда открывается потрясающий вид на город и Волгу! А еще рекомендую прогуляться по проспекту Кирова.",
    "В Саратове богатая история! Советую начать с центра города, где сохранились купеческие особняки XIX века. Интересуетесь архитектурой?",
]

WEATHER_RESPONSES: List[str] = [
    "Сегодня отличная погода для прогулок по городу! Рекомендую посетить набережную или один из парков.",
    "Если погода не располагает к прогулкам, советую посетить музеи или торговые центры. В Саратове много интересных крытых локаций!",
    "При любой погоде в Саратове найдется что посмотреть! Дождь - повод зайти в уютное кафе, солнце - прогуляться по набережной.",
]

BUDGET_RESPONSES: List[str] = [
    "В Саратове можно отлично провести время с любым бюджетом! Много бесплатных мест: парки, набережная, архитектурные памятники. Какой у вас примерный бюджет на день?",
    "Для экономного отдыха рекомендую: прогулки по центру, посещение бесплатных выставок, пикник в парке. А для комфортного отдыха - рестораны и развлекательные центры.",
    "Студенческий бюджет? Не проблема! В Саратове много доступных кафе, есть льготы в музеях, а природные красоты бесплатны для всех!",
]

# Checked in order, first rule with a keyword found in the lowercased message wins
FALLBACK_RULES: List[Tuple[AssistantTopic, Tuple[str, ...], List[str]]] = [
    (AssistantTopic.GREETING, ("привет", "здравствуй"), GREETING_RESPONSES),
    (AssistantTopic.FOOD, ("ресторан", "поесть", "еда"), FOOD_RESPONSES),
    (AssistantTopic.ATTRACTIONS, ("достопримечательност", "посмотреть", "музей"), ATTRACTION_RESPONSES),
    (AssistantTopic.WEATHER, ("погода", "дождь", "солнце"), WEATHER_RESPONSES),
    (AssistantTopic.BUDGET, ("бюджет", "деньги", "дешево"), BUDGET_RESPONSES),
]

GENERIC_RESPONSE = (
    "Интересный вопрос! В Саратове много возможностей для отдыха и развлечений. "
    "Могу порекомендовать посетить центр города, набережную или один из парков. "
    "А что именно вас интересует - культура, природа, еда или развлечения?"
)

PREMIUM_GREETING_SUFFIX = "Как Premium пользователь, у вас есть доступ к эксклюзивным рекомендациям!"


# ============================================================================
# SUGGESTIONS / RECOMMENDATION MESSAGE
# ============================================================================

SUGGESTIONS: List[str] = [
    "Где поесть в Саратове?",
    "Что посмотреть в городе?",
    "Составь маршрут на день",
    "Посоветуй недорогие места",
    "Где красиво сфотографироваться?",
]

SUGGESTIONS_SHOWN = 3

RECOMMENDATION_INTRO = "На основе ваших предпочтений рекомендую: "

TIME_OF_DAY_HINTS = {
    "morning": "Утром лучше всего посетить парки или набережную. ",
    "evening": "Вечером советую рестораны или культурные мероприятия. ",
}

MOOD_HINTS = {
    "active": "Для активного отдыха подойдут квесты и прогулки по городу.",
    "relaxed": "Для спокойного отдыха рекомендую кафе и музеи.",
}

ROUTE_DESCRIPTION_TEMPLATE = "Персональный маршрут на {duration} часов по интересным местам Саратова"
