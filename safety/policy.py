"""
Content Policy
Keyword moderation tables, canned messages, legal alternatives, disclaimer
documents and the published policy
"""
from typing import Any, Dict, List, Mapping, Optional, Tuple

from models import DisclaimerSeverity


PROHIBITED_CONTENT: Dict[str, Tuple[str, ...]] = {
    "illegal_activities": (
        "unauthorized computer access",
        "hacking for illegal purposes",
        "fraud",
        "identity theft",
        "forgery",
        "illegal drug manufacturing",
        "drug trafficking",
        "weapons for illegal use",
        "explosives for illegal use",
        "copyright piracy for profit",
        "counterfeiting money",
    ),
    "directly_harmful": (
        "suicide methods",
        "suicide encouragement",
        "self-harm promotion",
        "self-harm methods",
        "eating disorder promotion",
        "pro-ana",
        "pro-mia",
        "dangerous viral challenges",
    ),
    "exploitation": (
        "child exploitation",
        "child abuse",
        "human trafficking",
        "non-consensual activities",
    ),
    "hate_extremism": (
        "hate speech promotion",
        "extremist recruitment",
        "terrorism methods",
        "radicalization content",
    ),
}

# Common word-order variants of the entries above, mapped to the entry they restate.
PROHIBITED_PHRASINGS: Dict[str, Dict[str, str]] = {
    "illegal_activities": {
        "manufacture illegal drugs": "illegal drug manufacturing",
        "manufacturing illegal drugs": "illegal drug manufacturing",
        "make illegal drugs": "illegal drug manufacturing",
        "synthesize illegal drugs": "illegal drug manufacturing",
        "traffic drugs": "drug trafficking",
        "hack into someone": "unauthorized computer access",
        "break into someone's account": "unauthorized computer access",
        "steal someone's identity": "identity theft",
        "steal identities": "identity theft",
        "counterfeit money": "counterfeiting money",
        "forge documents": "forgery",
        "build a bomb": "explosives for illegal use",
    },
    "directly_harmful": {
        "ways to kill myself": "suicide methods",
        "how to commit suicide": "suicide methods",
        "how to self-harm": "self-harm methods",
    },
    "exploitation": {
        "traffic people": "human trafficking",
    },
    "hate_extremism": {
        "recruit extremists": "extremist recruitment",
        "join a terrorist group": "extremist recruitment",
    },
}

PROHIBITED_MESSAGES: Dict[str, str] = {
    "illegal_activities": (
        "We cannot provide learning paths for illegal activities. "
        "If you're interested in this field, we can suggest legal, ethical alternatives."
    ),
    "directly_harmful": (
        "We cannot provide content that may cause direct harm. "
        "If you're struggling, please reach out to a mental health professional or crisis helpline."
    ),
    "exploitation": "This request involves content that we cannot and will not provide under any circumstances.",
    "hate_extremism": "We do not provide content that promotes hate, extremism, or violence.",
}
DEFAULT_BLOCK_MESSAGE = "This request cannot be processed."

LEGAL_ALTERNATIVES: Dict[str, Tuple[str, ...]] = {
    "hacking for illegal purposes": (
        "Ethical hacking and penetration testing",
        "Cybersecurity fundamentals",
        "Network security",
    ),
    "unauthorized computer access": (
        "Cybersecurity career path",
        "Ethical hacking certification",
        "Information security",
    ),
    "illegal drug manufacturing": (
        "Pharmacology and drug development",
        "Chemistry fundamentals",
        "Medicinal chemistry",
    ),
    "weapons for illegal use": (
        "Engineering and materials science",
        "Physics and mechanics",
        "Historical weapons studies",
    ),
}

DISCLAIMER_CATEGORIES: Dict[str, Dict[str, Any]] = {
    "medical": {
        "keywords": (
            "treatment", "cure", "disease", "diagnosis", "medication", "health",
            "therapy", "remedy", "supplement", "diet", "nutrition", "mental health",
        ),
        "severity": DisclaimerSeverity.CRITICAL,
        "requires_acceptance": True,
    },
    "legal": {
        "keywords": (
            "law", "legal", "contract", "lawsuit", "rights", "attorney",
            "court", "litigation", "legal advice",
        ),
        "severity": DisclaimerSeverity.HIGH,
        "requires_acceptance": True,
    },
    "financial": {
        "keywords": (
            "investing", "trading", "stocks", "cryptocurrency", "forex",
            "financial advice", "investment strategy", "loans", "credit",
        ),
        "severity": DisclaimerSeverity.HIGH,
        "requires_acceptance": True,
    },
    "safety_critical": {
        "keywords": (
            "electrical", "wiring", "construction", "building", "climbing",
            "diving", "flying", "automotive repair", "gas", "plumbing",
        ),
        "severity": DisclaimerSeverity.MEDIUM,
        "requires_acceptance": False,
    },
    "controversial_educational": {
        "keywords": (
            "political theory", "controversial", "alternative viewpoint",
            "religious studies", "ethical debate",
        ),
        "severity": DisclaimerSeverity.LOW,
        "requires_acceptance": False,
    },
}

AGE_RESTRICTIONS: Dict[str, Dict[str, Any]] = {
    "alcohol": {
        "keywords": ("alcohol", "wine", "beer", "brewing", "distilling"),
        "min_age": 18,
        "requires_safety_disclaimer": False,
    },
    "gambling": {
        "keywords": ("gambling", "betting", "casino", "poker"),
        "min_age": 18,
        "requires_safety_disclaimer": False,
    },
    "firearms": {
        "keywords": ("firearms", "guns", "shooting", "weapons"),
        "min_age": 18,
        "requires_safety_disclaimer": True,
    },
    "mature_content": {
        "keywords": ("adult content", "mature themes"),
        "min_age": 18,
        "requires_safety_disclaimer": False,
    },
}

AGE_SAFETY_WARNING = "This topic requires safety precautions and may have age restrictions"
AGE_BLOCK_MESSAGE = "This content is restricted to users {min_age} years or older"
DISCLAIMER_WARNING = "This topic involves {type} information"

# disclaimer document used for each screening category
DISCLAIMER_DOCUMENT_FOR = {"safety_critical": "safety"}


def prohibited_message(category: Optional[str]) -> str:
    return PROHIBITED_MESSAGES.get(category or "", DEFAULT_BLOCK_MESSAGE)


def alternatives_for(keyword: Optional[str]) -> List[str]:
    return list(LEGAL_ALTERNATIVES.get(keyword or "", ()))


def keyword_table(categories: Mapping[str, Mapping[str, Any]]) -> Dict[str, Tuple[str, ...]]:
    """Reduce a category config table to ``{category: keywords}``."""
    return {category: tuple(config["keywords"]) for category, config in categories.items()}


_DISCLAIMERS: Dict[str, Dict[str, Any]] = {
    "medical": {
        "title": "Medical Information Disclaimer",
        "severity": DisclaimerSeverity.CRITICAL,
        "requires_acceptance": True,
        "intro": 'The information provided about "{topic}" is for educational purposes only and is NOT medical advice.',
        "points": (
            "Always consult qualified healthcare providers before making health decisions",
            "Do not stop or change prescribed medications without consulting your doctor",
            "This content does not replace professional diagnosis or treatment",
            "Some natural or alternative approaches can be dangerous or interact with medications",
            "Individual health situations vary",
        ),
        "closing": "If you have a medical emergency, call emergency services immediately.",
    },
    "legal": {
        "title": "Legal Information Disclaimer",
        "severity": DisclaimerSeverity.HIGH,
        "requires_acceptance": True,
        "intro": 'The information provided about "{topic}" is general educational material and does NOT constitute legal advice.',
        "points": (
            "Laws vary significantly by jurisdiction",
            "Legal situations are highly fact-specific",
            "This content does not create an attorney-client relationship",
            "Consult a qualified attorney licensed in your jurisdiction",
        ),
        "closing": "For specific legal matters, seek professional legal counsel.",
    },
    "financial": {
        "title": "Financial Information Disclaimer",
        "severity": DisclaimerSeverity.HIGH,
        "requires_acceptance": True,
        "intro": 'The information provided about "{topic}" is for educational purposes only and is NOT financial advice.',
        "points": (
            "Past performance does not guarantee future results",
            "All investments carry risk, including loss of principal",
            "General information may not fit your financial circumstances",
            "Tax implications vary by jurisdiction and individual situation",
        ),
        "closing": "Consult qualified financial advisors and tax professionals before making financial decisions.",
    },
    "safety": {
        "title": "Safety Warning",
        "severity": DisclaimerSeverity.MEDIUM,
        "requires_acceptance": False,
        "intro": 'The topic "{topic}" involves activities that may be dangerous if performed incorrectly.',
        "points": (
            "Follow proper safety protocols and use protective equipment",
            "Some activities require professional training or certification",
            "Local laws and regulations may apply",
            "Consider professional instruction before attempting",
        ),
        "closing": "If you're unsure, consult with professionals.",
    },
    "controversial_educational": {
        "title": "Educational Context",
        "severity": DisclaimerSeverity.LOW,
        "requires_acceptance": False,
        "intro": 'The topic "{topic}" may involve controversial or sensitive subjects.',
        "points": (
            "Information is presented from multiple perspectives",
            "Historical and academic context is included",
            "Content is educational, not advocacy",
        ),
        "closing": "This learning path aims to help you understand the topic, not to promote a viewpoint.",
    },
    "age_restricted": {
        "title": "Age-Restricted Content",
        "severity": DisclaimerSeverity.MEDIUM,
        "requires_acceptance": True,
        "intro": 'The topic "{topic}" involves content that may not be suitable for minors.',
        "points": (
            "You must be 18 years or older to access this content",
            "Local laws regarding this topic may vary",
            "Some activities may be illegal for minors",
        ),
        "closing": "By continuing, you confirm that you are of legal age in your jurisdiction.",
    },
}


def generate_disclaimer(disclaimer_type: Optional[str], topic: str) -> Optional[Dict[str, Any]]:
    """
    Build the disclaimer document for a screening category.

    Returns None for unknown or empty types.
    """
    key = DISCLAIMER_DOCUMENT_FOR.get(disclaimer_type or "", disclaimer_type or "")
    template = _DISCLAIMERS.get(key)
    if template is None:
        return None

    lines = [template["intro"].format(topic=topic), ""]
    lines.extend(f"- {point}" for point in template["points"])
    lines.extend(["", template["closing"]])
    return {
        "type": key,
        "title": template["title"],
        "severity": template["severity"].value,
        "content": "\n".join(lines),
        "requires_acceptance": template["requires_acceptance"],
    }


CONTENT_POLICY: Dict[str, Any] = {
    "version": "1.0",
    "principles": [
        "We believe in open access to educational content",
        "We do NOT censor based on political views or controversial topics",
        "We block only illegal content and content that directly harms users",
        "We provide disclaimers for professional topics (medical, legal, financial)",
        "We respect user autonomy while promoting safety",
    ],
    "prohibited": {category: list(keywords) for category, keywords in PROHIBITED_CONTENT.items()},
    "disclaimers": list(DISCLAIMER_CATEGORIES),
    "age_restrictions": {
        category: {"keywords": list(config["keywords"]), "min_age": config["min_age"]}
        for category, config in AGE_RESTRICTIONS.items()
    },
    "appeal_process": "Users can request review of any content decision through support",
}
