#!/usr/bin/env python3
"""
Seed System Presets
Creates or updates the system Style and Climate presets, optionally granting
starter credits to a user.

Usage:
    python scripts/seed_presets.py
    python scripts/seed_presets.py --grant-user user_123 --credits 100
"""

import argparse
import logging
import os
import sys
import uuid

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from shortforge.core.database import SessionLocal, init_db
from shortforge.core.logging import configure_logging
from shortforge.models import Climate, Style
from shortforge.narrative import validate_climate
from shortforge.services.credits import CreditLedger

logger = logging.getLogger("seed")


SYSTEM_STYLES = [
    {
        "name": "Curious Facts",
        "description": "Fast, intriguing facts that reward watching to the end.",
        "hook_type": "QUESTION",
        "hook_example": "Did you know octopuses have three hearts?",
        "cta_type": "COMMUNITY",
        "cta_example": "Which fact surprised you most? Tell me in the comments.",
        "script_function": "INFORM",
        "narrator_posture": "CURIOUS_GUIDE",
        "content_complexity": "SIMPLE",
        "visual_prompt_base": "cinematic vertical frame, vivid colors, sharp focus",
    },
    {
        "name": "Storyteller",
        "description": "A short narrative arc with a twist at the end.",
        "hook_type": "STATEMENT",
        "hook_example": "Nobody believed what the old lighthouse keeper found.",
        "cta_type": "CLIFFHANGER",
        "cta_example": "Part two tomorrow.",
        "script_function": "ENTERTAIN",
        "narrator_posture": "STORYTELLER",
        "content_complexity": "MODERATE",
        "visual_prompt_base": "moody cinematic lighting, film grain, dramatic composition",
    },
    {
        "name": "Motivational",
        "description": "Direct, energetic push toward action.",
        "hook_type": "CHALLENGE",
        "hook_example": "You have 30 seconds to change how you see tomorrow.",
        "cta_type": "CTA_DIRECT",
        "cta_example": "Follow for a daily push.",
        "script_function": "INSPIRE",
        "narrator_posture": "MENTOR",
        "content_complexity": "SIMPLE",
        "visual_prompt_base": "epic wide shots, golden hour, high contrast",
    },
]

SYSTEM_CLIMATES = [
    {
        "name": "Curiosity & Mystery",
        "description": "Curious facts and intriguing reveals.",
        "emotional_state": "CURIOSITY",
        "revelation_dynamic": "PROGRESSIVE",
        "narrative_pressure": "FLUID",
    },
    {
        "name": "Epic & Inspiring",
        "description": "Grandeur, motivation and visual impact.",
        "emotional_state": "DARK_INSPIRATION",
        "revelation_dynamic": "EARLY",
        "narrative_pressure": "FAST",
    },
    {
        "name": "Tension & Drama",
        "description": "Conflict, suspense and intense emotion.",
        "emotional_state": "THREAT",
        "revelation_dynamic": "HIDDEN",
        "narrative_pressure": "FAST",
    },
]


def _upsert(db, model, values: dict, prefix: str):
    existing = db.query(model).filter(model.name == values["name"], model.user_id.is_(None)).first()
    if existing:
        for key, value in values.items():
            setattr(existing, key, value)
        logger.info(f"- Updated {model.__name__}: {values['name']}")
    else:
        db.add(model(id=f"{prefix}_{uuid.uuid4().hex[:12]}", user_id=None, is_system=True, **values))
        logger.info(f"- Created {model.__name__}: {values['name']}")


def seed(db):
    for style in SYSTEM_STYLES:
        _upsert(db, Style, style, "style")

    for climate in SYSTEM_CLIMATES:
        # Store climates the way the guard rails will read them
        result = validate_climate(
            emotional_state=climate["emotional_state"],
            revelation_dynamic=climate["revelation_dynamic"],
            narrative_pressure=climate["narrative_pressure"],
        )
        for warning in result.warnings:
            logger.warning(f"  {climate['name']}: {warning}")
        _upsert(db, Climate, {**climate, **result.corrected.to_dict()}, "climate")

    db.commit()


def main():
    parser = argparse.ArgumentParser(description="Seed system presets")
    parser.add_argument("--grant-user", help="User id to grant starter credits to")
    parser.add_argument("--credits", type=int, default=100, help="Credits to grant (default: 100)")
    args = parser.parse_args()

    configure_logging()
    init_db()

    db = SessionLocal()
    try:
        seed(db)
        if args.grant_user:
            balance = CreditLedger(db).grant(args.grant_user, args.credits, "Starter credits")
            logger.info(f"Granted {args.credits} credits to {args.grant_user} (balance={balance})")
    finally:
        db.close()

    logger.info("Seed complete")


if __name__ == "__main__":
    main()
