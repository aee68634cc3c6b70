import logging
from typing import Dict, List

from ..models.categories import Category

logger = logging.getLogger(__name__)

SAMPLE_AGENTS = [
    {
        "name": "Dr. Sarah Johnson",
        "voice": "serena",
        "greeting": "Hello, I'm Dr. Sarah Johnson. How can I assist you today?",
        "description": "General Medicine",
        "temperature": 0.7,
        "interruption_sensitivity": 0.5,
        "status": "draft",
    },
    {
        "name": "Dr. Michael Chen",
        "voice": "morgan",
        "greeting": "Hi there, this is Dr. Michael Chen. What brings you in today?",
        "description": "Cardiology",
        "temperature": 0.6,
        "interruption_sensitivity": 0.5,
        "status": "draft",
    },
    {
        "name": "Dr. Emily Rodriguez",
        "voice": "ava",
        "greeting": "Hello, I'm Dr. Rodriguez. How may I help you today?",
        "description": "Pediatrics",
        "temperature": 0.7,
        "interruption_sensitivity": 0.6,
        "status": "draft",
    },
]

SAMPLE_KNOWLEDGE_BASES = [
    {
        "name": "Getting Started with BlvckWall AI",
        "description": "Welcome to BlvckWall AI! This guide will help you get started with our platform.",
        "type": "onboarding",
    },
    {
        "name": "HIPAA Compliance Guide",
        "description": "Ensuring HIPAA compliance is critical for healthcare organizations.",
        "type": "compliance",
    },
]

SAMPLE_FLOWS = [
    {
        "name": "Appointment Scheduling",
        "description": "Template for scheduling patient appointments",
        "nodes": [
            {"id": "start", "type": "start", "content": "Conversation Start"},
            {"id": "greeting", "type": "message",
             "content": "Hello, I'd like to help you schedule an appointment. What day works best for you?"},
            {"id": "check_availability", "type": "condition", "content": "Check calendar availability"},
        ],
        "edges": [
            {"source": "start", "target": "greeting"},
            {"source": "greeting", "target": "check_availability"},
        ],
    },
    {
        "name": "Medication Refill",
        "description": "Template for handling medication refill requests",
        "nodes": [
            {"id": "start", "type": "start", "content": "Conversation Start"},
            {"id": "greeting", "type": "message",
             "content": "I understand you need a medication refill. Which medication do you need refilled?"},
        ],
        "edges": [{"source": "start", "target": "greeting"}],
    },
]

SAMPLE_VIDEO_SUMMARIES = [
    {
        "title": "Patient Consultation Summary",
        "summary": "Dr. Smith discusses treatment options for chronic back pain.",
        "timestamps": [
            {"time": "00:15", "label": "Introduction"},
            {"time": "01:23", "label": "Symptoms Discussion"},
            {"time": "03:45", "label": "Treatment Options"},
        ],
        "status": "completed",
    },
    {
        "title": "Follow-up Appointment",
        "summary": "Review of patient progress after initial treatment.",
        "timestamps": [
            {"time": "00:10", "label": "Progress Review"},
            {"time": "01:05", "label": "Medication Adjustment"},
            {"time": "02:30", "label": "Next Steps"},
        ],
        "status": "completed",
    },
]

SAMPLES = (
    (Category.AGENTS, SAMPLE_AGENTS),
    (Category.KNOWLEDGE_BASES, SAMPLE_KNOWLEDGE_BASES),
    (Category.CONVERSATION_FLOWS, SAMPLE_FLOWS),
    (Category.VIDEO_SUMMARIES, SAMPLE_VIDEO_SUMMARIES),
)


def seed_sample_data(facade) -> Dict[str, int]:
    """Create demo records for the current owner unless they already have agents.

    Returns the number of records created per category.
    """
    if facade.list(Category.AGENTS):
        logger.info("Sample data skipped: owner already has agents")
        return {cat.value: 0 for cat, _ in SAMPLES}

    created: Dict[str, int] = {}
    for cat, records in SAMPLES:
        rows: List[dict] = [facade.create(cat, dict(fields)) for fields in records]
        created[cat.value] = len(rows)
    logger.info(f"Sample data created: {created}")
    return created
