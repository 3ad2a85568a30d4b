LIFETIME_DAYS = 36500

PLANS = {
    "1month": {"days": 30, "name": "1 месяц", "emoji": "📅"},
    "3months": {"days": 90, "name": "3 месяца", "emoji": "📆"},
    "6months": {"days": 180, "name": "6 месяцев", "emoji": "🗓️"},
    "1year": {"days": 365, "name": "1 год", "emoji": "📅"},
    "lifetime": {"days": LIFETIME_DAYS, "name": "Навсегда", "emoji": "♾️"},
}


def plan_days(plan: str) -> int:
    if plan not in PLANS:
        raise ValueError(f"Unknown plan: {plan}")
    return PLANS[plan]["days"]


def subscription_type(days: int) -> str:
    return "lifetime" if days >= LIFETIME_DAYS else "pro"


def plan_label(plan: str) -> str:
    info = PLANS.get(plan)
    if not info:
        return plan
    return f"{info['emoji']} {info['name']}"
