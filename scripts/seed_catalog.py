"""
Seed script for the compound catalog and a demo user history

Populates compounds (with evidence-lane dosing, contraindications and
interaction edges), protocol templates, and one demo user with a running
protocol and four weeks of dose, outcome and event logs.

Re-running replaces previously seeded records.

Usage:
    python scripts/seed_catalog.py
    python scripts/seed_catalog.py --no-demo
"""

import argparse
import asyncio
import logging
import os
import sys
from datetime import datetime, timedelta

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from motor.motor_asyncio import AsyncIOMotorClient
from dotenv import load_dotenv

from models.tracking import UserProtocol, ProtocolCompound
from engine.catalog import compound_from_document

logger = logging.getLogger(__name__)

DEMO_USER_ID = "demo-user"
DEMO_PROTOCOL_ID = "demo-bpc-tb"


# =============================================================================
# COMPOUNDS DATA
# =============================================================================

def _lane(dose_min, dose_max, frequency, unit="mcg", indication=None):
    return {
        "dose_min": dose_min,
        "dose_max": dose_max,
        "unit": unit,
        "frequency": frequency,
        "indication": indication,
    }


COMPOUNDS = [
    {
        "compound_id": "bpc-157",
        "name": "BPC-157",
        "description": "Body Protection Compound - tendon, ligament and gut healing, anti-inflammatory",
        "lanes": {
            "expert": _lane(250, 500, "daily", indication="soft tissue injury"),
            "experimental": _lane(500, 1000, "2x daily"),
        },
        "contraindications": ["active cancer"],
    },
    {
        "compound_id": "tb-500",
        "name": "TB-500",
        "description": "Thymosin Beta-4 fragment for healing, recovery and flexibility",
        "lanes": {
            "expert": _lane(2000, 2500, "2x/week", indication="loading phase"),
            "experimental": _lane(5000, 7500, "2x/week"),
        },
        "contraindications": ["active cancer"],
    },
    {
        "compound_id": "ghk-cu",
        "name": "GHK-Cu",
        "description": "Copper peptide for skin, hair and wound healing",
        "route": "topical",
        "lanes": {
            "clinical": _lane(1000, 2000, "daily", indication="topical wound care"),
            "expert": _lane(1000, 2000, "daily"),
        },
        "contraindications": ["wilson's disease"],
    },
    {
        "compound_id": "semaglutide",
        "name": "Semaglutide",
        "description": "GLP-1 agonist for weight loss, appetite control and metabolic health",
        "lanes": {
            "clinical": _lane(250, 2400, "weekly", indication="obesity, type 2 diabetes"),
        },
        "contraindications": ["medullary thyroid carcinoma", "pancreatitis", "pregnancy"],
        "interactions": [
            {"target_id": "tirzepatide", "target_name": "Tirzepatide",
             "severity": "avoid", "note": "duplicate incretin therapy"},
        ],
    },
    {
        "compound_id": "tirzepatide",
        "name": "Tirzepatide",
        "description": "Dual GIP/GLP-1 agonist for weight loss and glycemic control",
        "lanes": {
            "clinical": _lane(2500, 15000, "weekly", indication="obesity, type 2 diabetes"),
        },
        "contraindications": ["medullary thyroid carcinoma", "pancreatitis", "pregnancy"],
        "interactions": [
            {"target_id": "semaglutide", "target_name": "Semaglutide",
             "severity": "avoid", "note": "duplicate incretin therapy"},
        ],
    },
    {
        "compound_id": "ipamorelin",
        "name": "Ipamorelin",
        "description": "Growth hormone secretagogue for sleep, recovery and body composition",
        "lanes": {
            "expert": _lane(100, 300, "5x/week"),
            "experimental": _lane(300, 500, "daily"),
        },
        "contraindications": ["active cancer"],
        "interactions": [
            {"target_id": "cjc-1295", "target_name": "CJC-1295",
             "severity": "caution", "note": "additive growth hormone release"},
        ],
    },
    {
        "compound_id": "cjc-1295",
        "name": "CJC-1295",
        "description": "GHRH analog for growth hormone release, recovery and sleep",
        "lanes": {
            "expert": _lane(1000, 2000, "weekly"),
        },
        "contraindications": ["active cancer"],
    },
    {
        "compound_id": "selank",
        "name": "Selank",
        "description": "Anxiolytic peptide for stress, anxiety and focus",
        "route": "intranasal",
        "lanes": {
            "expert": _lane(250, 500, "daily"),
        },
    },
    {
        "compound_id": "epithalon",
        "name": "Epithalon",
        "description": "Telomerase activating peptide for longevity and sleep",
        "lanes": {
            "experimental": _lane(5000, 10000, "daily", unit="mcg", indication="10-day cycle"),
        },
    },
    {
        "compound_id": "dsip",
        "name": "DSIP",
        "description": "Delta sleep inducing peptide",
        "lanes": {
            "experimental": _lane(100, 300, "EOD"),
        },
    },
]


TEMPLATES = [
    {
        "template_id": "wolverine",
        "name": "Wolverine Stack",
        "description": "Injury recovery: BPC-157 with TB-500",
        "compound_ids": ["bpc-157", "tb-500"],
    },
    {
        "template_id": "gh-recovery",
        "name": "GH Recovery",
        "description": "Sleep and recovery via growth hormone release",
        "compound_ids": ["cjc-1295", "ipamorelin", "dsip"],
    },
    {
        "template_id": "metabolic-reset",
        "name": "Metabolic Reset",
        "description": "Weight loss with healing support",
        "compound_ids": ["semaglutide", "bpc-157"],
    },
]


# =============================================================================
# SEEDING FUNCTIONS
# =============================================================================

async def seed_compounds(db) -> int:
    """Replace the compound catalog"""
    docs = []
    for c in COMPOUNDS:
        doc = dict(c, slug=c["compound_id"])
        # Validate before writing
        compound_from_document(doc)
        docs.append(doc)

    await db.compounds.delete_many({"compound_id": {"$in": [d["compound_id"] for d in docs]}})
    await db.compounds.insert_many(docs)
    logger.info(f"Seeded {len(docs)} compounds")
    return len(docs)


async def seed_templates(db) -> int:
    """Replace the protocol templates"""
    known = {c["compound_id"] for c in COMPOUNDS}
    for t in TEMPLATES:
        missing = [cid for cid in t["compound_ids"] if cid not in known]
        if missing:
            raise ValueError(f"Template {t['template_id']} references unknown compounds: {missing}")

    await db.protocol_templates.delete_many(
        {"template_id": {"$in": [t["template_id"] for t in TEMPLATES]}}
    )
    await db.protocol_templates.insert_many([dict(t) for t in TEMPLATES])
    logger.info(f"Seeded {len(TEMPLATES)} templates")
    return len(TEMPLATES)


async def seed_demo_history(db, start: datetime = None) -> UserProtocol:
    """
    Replace the demo user's history: one active protocol started four weeks
    ago, a daily BPC-157 dose and twice-weekly TB-500 dose with some missed
    days, and daily energy and sleep scores.
    """
    start = start or (datetime.utcnow() - timedelta(days=28)).replace(
        hour=8, minute=0, second=0, microsecond=0
    )

    for collection in ("users", "user_protocols", "dose_logs", "outcome_logs", "protocol_events"):
        await db[collection].delete_many({"user_id": DEMO_USER_ID})

    await db.users.insert_many([{"user_id": DEMO_USER_ID, "display_name": "Demo User"}])

    protocol = UserProtocol(
        protocol_id=DEMO_PROTOCOL_ID,
        user_id=DEMO_USER_ID,
        name="Wolverine Stack",
        start_date=start,
        compounds=[
            ProtocolCompound(compound_id="bpc-157", dose=250, frequency="daily"),
            ProtocolCompound(compound_id="tb-500", dose=2000, frequency="2x/week"),
        ],
    )
    await db.user_protocols.insert_many([protocol.model_dump()])

    doses = []
    outcomes = []
    for day in range(28):
        taken_at = start + timedelta(days=day)
        week = day // 7
        # Weeks 2 and 4 skip every third day
        if week % 2 == 0 or day % 3 != 0:
            doses.append({
                "user_id": DEMO_USER_ID,
                "protocol_id": DEMO_PROTOCOL_ID,
                "compound_id": "bpc-157",
                "taken_at": taken_at,
                "amount": 250,
            })
        if day % 7 in (0, 3):
            doses.append({
                "user_id": DEMO_USER_ID,
                "protocol_id": DEMO_PROTOCOL_ID,
                "compound_id": "tb-500",
                "taken_at": taken_at + timedelta(minutes=5),
                "amount": 2000,
            })
        outcomes.append({
            "user_id": DEMO_USER_ID,
            "metric": "energy",
            "value": 5 + week + (1 if week % 2 == 0 else 0),
            "recorded_at": taken_at + timedelta(hours=12),
        })
        outcomes.append({
            "user_id": DEMO_USER_ID,
            "metric": "pain",
            "value": max(1, 7 - week * 2),
            "recorded_at": taken_at + timedelta(hours=12),
        })

    await db.dose_logs.insert_many(doses)
    await db.outcome_logs.insert_many(outcomes)
    await db.protocol_events.insert_many([
        {
            "user_id": DEMO_USER_ID,
            "protocol_id": DEMO_PROTOCOL_ID,
            "event_type": "side_effect",
            "title": "Injection site redness",
            "severity": "low",
            "occurred_at": start + timedelta(days=3),
        },
        {
            "user_id": DEMO_USER_ID,
            "protocol_id": DEMO_PROTOCOL_ID,
            "event_type": "side_effect",
            "title": "Lightheadedness",
            "severity": "moderate",
            "occurred_at": start + timedelta(days=11),
        },
        {
            "user_id": DEMO_USER_ID,
            "protocol_id": DEMO_PROTOCOL_ID,
            "event_type": "milestone",
            "title": "Full range of motion back",
            "occurred_at": start + timedelta(days=20),
        },
    ])

    logger.info(
        f"Seeded demo user {DEMO_USER_ID}: {len(doses)} doses, {len(outcomes)} outcomes"
    )
    return protocol


async def seed_all(db, demo: bool = True) -> dict:
    """Seed catalog and, optionally, the demo history"""
    counts = {
        "compounds": await seed_compounds(db),
        "templates": await seed_templates(db),
    }
    if demo:
        await seed_demo_history(db)
        counts["demo_user"] = DEMO_USER_ID
    return counts


async def main(demo: bool = True):
    """Main seeding function"""
    mongo_url = os.getenv("MONGODB_URL", os.getenv("MONGO_PUBLIC_URL", "mongodb://localhost:27017"))
    db_name = os.getenv("MONGODB_DATABASE", "peptide_protocols")

    print(f"Connecting to MongoDB at {mongo_url}...")
    client = AsyncIOMotorClient(mongo_url)
    db = client[db_name]

    print(f"Using database: {db_name}")
    try:
        counts = await seed_all(db, demo=demo)
    finally:
        client.close()

    print()
    print("Seeding complete!")
    for key, value in counts.items():
        print(f"  {key}: {value}")


if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="Seed the protocol engine catalog")
    parser.add_argument("--no-demo", action="store_true", help="Skip the demo user history")
    args = parser.parse_args()

    asyncio.run(main(demo=not args.no_demo))
