"""Rule-based analysis of a website record.

Most rules are plain ``(predicate, advisory)`` pairs evaluated in order.
Every predicate is evaluated, and each true one contributes its advisory.
Advisories are strings or small dicts; dicts are copied on the way out so
the tables stay untouched.
"""
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from .extractor import parse_count

Rule = Tuple[Callable[[Dict[str, Any]], bool], Any]
ScoredRule = Tuple[Callable[[Dict[str, Any]], bool], str, int]


def _feature(record: Dict[str, Any], name: str) -> bool:
    return bool(record.get("technical_features", {}).get(name))


def _industry(record: Dict[str, Any], name: str) -> bool:
    return name in record.get("categories", {}).get("industries", {})


def _capability(record: Dict[str, Any], name: str) -> bool:
    """Feature keywords (automation, ai, security...) mentioned on the page."""
    return name in record.get("categories", {}).get("features", {})


def _model(record: Dict[str, Any], name: str) -> bool:
    return name in record.get("categories", {}).get("business_model", {})


def _pricing(record: Dict[str, Any]) -> Dict[str, Any]:
    return record.get("pricing", {})


def _stack(record: Dict[str, Any], group: str) -> bool:
    return bool(record.get("stack", {}).get(group))


def _has_customers(record: Dict[str, Any]) -> bool:
    return record.get("metrics", {}).get("customer_count") not in (None, "N/A")


def _pain_categories(record: Dict[str, Any], group: Optional[str] = None) -> int:
    indicators = record.get("pain_indicators", {})
    groups = [indicators.get(group, {})] if group else list(indicators.values())
    return sum(len(categories) for categories in groups)


def _value_props(record: Dict[str, Any]) -> List[str]:
    return record.get("marketing", {}).get("value_props", [])


PAIN_POINT_RULES: List[Rule] = [
    (lambda r: not _feature(r, "has_api"), "Limited integration capabilities"),
    (lambda r: not _feature(r, "has_analytics"), "Lacks advanced analytics and reporting"),
    (lambda r: _pricing(r).get("pricing_type") == "Not specified", "Pricing transparency issues"),
    (lambda r: not r.get("testimonials"), "Limited social proof"),
    (lambda r: not _feature(r, "has_customization"), "Limited customization options"),
]

RECOMMENDATION_RULES: List[Rule] = [
    (lambda r: _industry(r, "saas"), "Focus on integration capabilities and API documentation"),
    (lambda r: _industry(r, "martech"), "Emphasize email deliverability and automation features"),
    (lambda r: r.get("business_indicators", {}).get("target_market") == "Enterprise",
     "Highlight security features and compliance capabilities"),
    (lambda r: _feature(r, "has_automation"), "Showcase time-saving and efficiency metrics"),
]

COMPETITIVE_ADVANTAGE_RULES: List[Rule] = [
    (lambda r: _capability(r, "ai"), "AI/ML Capabilities"),
    (lambda r: _capability(r, "automation"), "Advanced Automation"),
    (_has_customers, "Large Customer Base"),
]

STRENGTH_RULES: List[Rule] = [
    (lambda r: _capability(r, "automation"), "Strong automation capabilities"),
    (_has_customers, "Established customer base"),
    (lambda r: _stack(r, "analytics"), "Advanced analytics capabilities"),
]

WEAKNESS_RULES: List[Rule] = [
    (lambda r: not _capability(r, "security"), "Limited security features"),
    (lambda r: not r.get("testimonials"), "Limited social proof"),
    (lambda r: not _capability(r, "integration"), "Limited integration capabilities"),
]

OPPORTUNITY_RULES: List[Rule] = [
    (lambda r: not _model(r, "b2c"), "Potential for B2C market expansion"),
    (lambda r: not _capability(r, "ai"), "AI/ML integration potential"),
    (lambda r: _capability(r, "integration"), "Ecosystem expansion through partnerships"),
]

THREAT_RULES: List[Rule] = [
    (lambda r: bool(r.get("competitors")), "Active competition in space"),
    (lambda r: not _capability(r, "security"), "Potential security vulnerabilities"),
    (lambda r: len(_pricing(r).get("price_points", [])) == 1, "Limited pricing flexibility"),
]

# Checked in order; the first model with a hit is the primary one.
PRIMARY_MODELS = (("subscription", "Subscription"), ("marketplace", "Marketplace"), ("transactional", "Transactional"))

SECONDARY_MODEL_RULES: List[Rule] = [
    (lambda r: _pricing(r).get("enterprise_offering"), "Enterprise Sales"),
    (lambda r: _feature(r, "has_api"), "API-as-a-Service"),
]

REVENUE_STREAM_RULES: List[Rule] = [
    (lambda r: _model(r, "transactional"),
     {"type": "Transactional", "details": ["One-time purchases"], "recurring": False}),
    (lambda r: _pricing(r).get("enterprise_offering"),
     {"type": "Enterprise", "details": ["Custom enterprise solutions"], "recurring": True}),
    (lambda r: _feature(r, "has_api"),
     {"type": "API/Usage", "details": ["API access fees"], "recurring": True}),
]

SCALABILITY_RULES: List[ScoredRule] = [
    (lambda r: _capability(r, "automation"), "Automated processes", 2),
    (lambda r: _feature(r, "has_api"), "API-first architecture", 2),
    (lambda r: _pricing(r).get("has_free_trial"), "Self-service onboarding", 1),
]

SCALABILITY_RISKS: List[ScoredRule] = [
    (lambda r: not _capability(r, "automation"), "Manual processes", 0),
    (lambda r: _pain_categories(r) > 2, "Multiple pain points", -1),
]

STACK_STRENGTH_RULES: List[ScoredRule] = [
    (lambda r: _stack(r, "frontend"), "Modern frontend framework", 2),
    (lambda r: _stack(r, "analytics"), "Analytics integration", 1),
]

# (predicate, gap, recommendation)
STACK_GAP_RULES = [
    (lambda r: not _capability(r, "security"), "Security features", "Implement security best practices"),
    (lambda r: not _feature(r, "has_api"), "API architecture", "Develop API-first approach"),
]

CURRENT_INFRASTRUCTURE_RULES: List[Rule] = [
    (lambda r: _stack(r, "frontend"), "Frontend Framework"),
    (lambda r: _stack(r, "analytics"), "Analytics Platform"),
]

REQUIRED_INFRASTRUCTURE_RULES: List[Rule] = [
    (lambda r: _industry(r, "saas"), "Cloud Infrastructure"),
    (lambda r: _industry(r, "saas"), "API Gateway"),
    (lambda r: _capability(r, "security"), "Security Infrastructure"),
]

SECURITY_MEASURE_RULES: List[Rule] = [
    (lambda r: _capability(r, "security"), "Security Features Present"),
    (lambda r: _industry(r, "fintech"), "Financial Security Requirements"),
]

SECURITY_RISK_RULES: List[Rule] = [
    (lambda r: not _capability(r, "security"), "Lack of Security Features"),
    (lambda r: _industry(r, "fintech") and not _capability(r, "security"), "Missing Financial Security Requirements"),
]

TECHNICAL_DEBT_RULES: List[Rule] = [
    (lambda r: not _capability(r, "automation"), "Manual processes that could be automated"),
    (lambda r: not _feature(r, "has_api"), "Lack of API architecture"),
    (lambda r: _pain_categories(r, "technical") > 0, "Existing technical pain points"),
]

GROWTH_INDICATOR_RULES: List[Rule] = [
    (_has_customers, "Growing Customer Base"),
    (lambda r: _capability(r, "automation"), "Scalable Architecture"),
]

MILESTONE_RULES: List[Rule] = [
    (lambda r: not _feature(r, "has_api"), "API Development"),
    (lambda r: not _capability(r, "automation"), "Process Automation"),
]

BOTTLENECK_RULES: List[Rule] = [
    (lambda r: not _capability(r, "automation"),
     {"type": "Technical", "issue": "Manual processes limiting scale", "impact": "High"}),
    (lambda r: not _pricing(r).get("enterprise_offering"),
     {"type": "Business", "issue": "Limited enterprise readiness", "impact": "Medium"}),
]

GROWTH_OPPORTUNITY_RULES: List[Rule] = [
    (lambda r: not _model(r, "b2c"),
     {"type": "Market Expansion", "description": "B2C market entry potential", "effort": "High", "impact": "High"}),
    (lambda r: not _capability(r, "ai"),
     {"type": "Product Development", "description": "AI/ML feature integration", "effort": "High", "impact": "Medium"}),
]

STRATEGIC_RECOMMENDATION_RULES: List[Rule] = [
    (lambda r: not _capability(r, "ai") and _industry(r, "saas"), {
        "category": "Product Development",
        "recommendation": "Consider AI/ML integration for enhanced functionality",
        "priority": "High",
        "impact": "Competitive advantage in SaaS space",
    }),
    (lambda r: _has_customers(r) and not _model(r, "b2c"), {
        "category": "Market Expansion",
        "recommendation": "Evaluate B2C market entry potential",
        "priority": "Medium",
        "impact": "Revenue stream diversification",
    }),
    (lambda r: not _capability(r, "security") and _industry(r, "fintech"), {
        "category": "Infrastructure",
        "recommendation": "Enhance security features and compliance measures",
        "priority": "Critical",
        "impact": "Risk mitigation and market trust",
    }),
]

# Checked in order; the first category with a hit wins.
USP_CATEGORIES = (
    ("Technical", ("technolog", "platform")),
    ("Price", ("price", "cost")),
    ("Service", ("service", "support")),
)


def apply_rules(record: Dict[str, Any], rules: List[Rule]) -> List[Any]:
    return [dict(advisory) if isinstance(advisory, dict) else advisory for predicate, advisory in rules if predicate(record)]


def apply_scored(record: Dict[str, Any], rules: List[ScoredRule]) -> Tuple[List[str], int]:
    factors, score = [], 0
    for predicate, factor, points in rules:
        if predicate(record):
            factors.append(factor)
            score += points
    return factors, score


def analyze(record: Dict[str, Any]) -> Dict[str, List[str]]:
    return {
        "pain_points": apply_rules(record, PAIN_POINT_RULES),
        "recommendations": apply_rules(record, RECOMMENDATION_RULES),
    }


def average_price(price_points: List[str]) -> float:
    prices = []
    for price in price_points:
        match = re.search(r"\d+", price)
        prices.append(int(match.group(0)) if match else 0)
    return sum(prices) / len(prices) if prices else 0


def _customer_count(record: Dict[str, Any]) -> int:
    raw = record.get("metrics", {}).get("customer_count")
    if raw in (None, "N/A"):
        return 0
    return parse_count(str(raw)) or 0


def assess_position(record: Dict[str, Any]) -> Dict[str, str]:
    """Market segment from pricing and growth stage from customer count."""
    pricing = _pricing(record)
    segment = "undefined"
    if pricing.get("enterprise_offering"):
        segment = "enterprise"
    elif pricing.get("price_points"):
        avg = average_price(pricing["price_points"])
        segment = "premium" if avg > 100 else "mid-market" if avg > 20 else "economy"

    customers = _customer_count(record)
    stage = "Early Stage"
    if customers > 100000:
        stage = "Enterprise"
    elif customers > 10000:
        stage = "Scale"
    elif customers > 1000:
        stage = "Growth"

    return {"segment": segment, "growth_stage": stage}


def categorize_usp(proposition: str) -> str:
    lower = proposition.lower()
    for category, fragments in USP_CATEGORIES:
        if any(fragment in lower for fragment in fragments):
            return category
    return "Other"


def competitive_analysis(record: Dict[str, Any]) -> Dict[str, Any]:
    props = _value_props(record)
    differentiators = []
    for prop in props:
        if ("only" in prop.lower() or "unique" in prop.lower()) and prop not in differentiators:
            differentiators.append(prop)
    usps = [
        {"proposition": prop, "category": categorize_usp(prop)}
        for prop in props
        if any(word in prop.lower() for word in ("only", "first", "leading"))
    ]
    return {
        "market_position": {
            "segment": assess_position(record)["segment"],
            "differentiators": differentiators,
            "competitive_advantages": apply_rules(record, COMPETITIVE_ADVANTAGE_RULES),
        },
        "strengths_and_weaknesses": {
            "strengths": apply_rules(record, STRENGTH_RULES),
            "weaknesses": apply_rules(record, WEAKNESS_RULES),
            "unique_selling_points": usps,
        },
        "opportunities": apply_rules(record, OPPORTUNITY_RULES),
        "threats": apply_rules(record, THREAT_RULES),
    }


def customer_segments(record: Dict[str, Any]) -> Dict[str, List[str]]:
    primary = [label for name, label in (("b2b", "B2B"), ("b2c", "B2C")) if _model(record, name)]
    primary += [industry.capitalize() for industry in record.get("categories", {}).get("industries", {})]

    secondary = []
    if _pricing(record).get("enterprise_offering"):
        secondary.append("Enterprise")
    if _pricing(record).get("has_free_plan"):
        secondary.append("SMB/Startup")

    potential = []
    if "B2C" not in primary and _capability(record, "customization"):
        potential.append("B2C Market")
    if "Enterprise" not in primary and _capability(record, "security"):
        potential.append("Enterprise Market")

    return {"primary": primary, "secondary": secondary, "potential": potential}


def business_model_analysis(record: Dict[str, Any]) -> Dict[str, Any]:
    plans = _pricing(record).get("plans", [])
    primary = next((label for name, label in PRIMARY_MODELS if _model(record, name)), "")

    streams = []
    if plans:
        streams.append({"type": "Subscription", "details": [plan["name"] for plan in plans], "recurring": True})
    streams += apply_rules(record, REVENUE_STREAM_RULES)

    positive, score = apply_scored(record, SCALABILITY_RULES)
    negative, penalty = apply_scored(record, SCALABILITY_RISKS)
    bottlenecks = [] if _capability(record, "automation") else ["Process automation needed"]

    return {
        "type": {
            "primary": primary,
            "secondary": apply_rules(record, SECONDARY_MODEL_RULES),
            "monetization": [f"{plan['name']} Plan Revenue" for plan in plans if plan.get("prices")],
        },
        "revenue_streams": streams,
        "customer_segments": customer_segments(record),
        "scalability": {
            "score": min(max(score + penalty, 0), 10),
            "factors": {"positive": positive, "negative": negative},
            "bottlenecks": bottlenecks,
        },
    }


def technical_analysis(record: Dict[str, Any]) -> Dict[str, Any]:
    strengths, maturity = apply_scored(record, STACK_STRENGTH_RULES)
    gaps = [(gap, advice) for predicate, gap, advice in STACK_GAP_RULES if predicate(record)]

    current = apply_rules(record, CURRENT_INFRASTRUCTURE_RULES)
    required = apply_rules(record, REQUIRED_INFRASTRUCTURE_RULES)

    return {
        "stack_maturity": {
            "maturity_score": maturity,
            "strengths": strengths,
            "gaps": [gap for gap, _ in gaps],
            "recommendations": [advice for _, advice in gaps],
        },
        "infrastructure_needs": {
            "current": current,
            "required": required,
            "gaps": [item for item in required if item not in current],
        },
        "security_profile": {
            "status": "Strong" if _capability(record, "security") else "Needs Improvement",
            "measures": apply_rules(record, SECURITY_MEASURE_RULES),
            "risks": apply_rules(record, SECURITY_RISK_RULES),
        },
        "technical_debt": apply_rules(record, TECHNICAL_DEBT_RULES),
    }


def growth_analysis(record: Dict[str, Any]) -> Dict[str, Any]:
    metrics = record.get("metrics", {})
    return {
        "stage": {
            "stage": assess_position(record)["growth_stage"],
            "indicators": apply_rules(record, GROWTH_INDICATOR_RULES),
            "next_milestones": apply_rules(record, MILESTONE_RULES),
        },
        "metrics": {
            "customers": metrics.get("customer_count", "N/A"),
            "revenue": metrics.get("revenue", "N/A"),
            "employees": metrics.get("employee_count", "N/A"),
            "age": metrics.get("company_age", "N/A"),
        },
        "bottlenecks": apply_rules(record, BOTTLENECK_RULES),
        "opportunities": apply_rules(record, GROWTH_OPPORTUNITY_RULES),
    }


def analyze_strategy(record: Dict[str, Any]) -> Dict[str, Any]:
    """Competitive, business model, technical and growth sections plus prioritised recommendations."""
    return {
        "competitive": competitive_analysis(record),
        "business_model": business_model_analysis(record),
        "technical": technical_analysis(record),
        "growth": growth_analysis(record),
        "strategic_recommendations": apply_rules(record, STRATEGIC_RECOMMENDATION_RULES),
    }
