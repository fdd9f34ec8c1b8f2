#!/usr/bin/env python3
"""
Peptide Protocol Engine - CLI Tool

Command-line interface for seeding and running the engines against MongoDB.

Usage:
    python cli.py seed
    python cli.py suggest --goal healing --risk moderate --max-injections 10
    python cli.py personalize wolverine --condition "active cancer"
    python cli.py insights demo-user
    python cli.py analyze-protocol demo-user demo-bpc-tb
"""

import asyncio
import argparse
import json
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def _connect():
    """Motor client and database from the API settings"""
    from motor.motor_asyncio import AsyncIOMotorClient
    from api.deps import get_settings

    settings = get_settings()
    client = AsyncIOMotorClient(settings.mongodb_url)
    return client, client[settings.mongodb_database]


def _print(model):
    print(json.dumps(model.model_dump(mode="json"), indent=2))


async def cmd_seed(args):
    """Seed catalog and demo history"""
    from scripts.seed_catalog import seed_all

    logger.info("Seeding catalog...")
    client, db = _connect()
    try:
        counts = await seed_all(db, demo=not args.no_demo)
    finally:
        client.close()

    print("\n🌱 Seeding complete:")
    for key, value in counts.items():
        print(f"  {key}: {value}")


async def cmd_suggest(args):
    """Suggest a protocol from the catalog"""
    from api.protocol_engine_service import ProtocolEngineService
    from models.catalog import SuggestionRequest

    request = SuggestionRequest(
        goals=args.goal,
        risk_appetite=args.risk,
        current_compound_ids=args.current,
        conditions=args.condition,
        max_compounds=args.max_compounds,
        max_injections_per_week=args.max_injections,
        budget=args.budget,
    )

    client, db = _connect()
    try:
        suggestion = await ProtocolEngineService(db).suggest_protocol(args.user, request)
    finally:
        client.close()

    _print(suggestion)


async def cmd_personalize(args):
    """Personalize a template"""
    from api.protocol_engine_service import ProtocolEngineService
    from models.catalog import PersonalizeRequest

    request = PersonalizeRequest(
        risk_appetite=args.risk,
        current_compound_ids=args.current,
        conditions=args.condition,
        max_compounds=args.max_compounds,
        max_injections_per_week=args.max_injections,
        budget=args.budget,
    )

    client, db = _connect()
    try:
        suggestion = await ProtocolEngineService(db).personalize_template(
            args.user, args.template_id, request
        )
    finally:
        client.close()

    _print(suggestion)


async def cmd_insights(args):
    """Show a user's insights"""
    from api.deps import get_settings
    from api.insight_service import InsightService

    client, db = _connect()
    try:
        insights = await InsightService(db, get_settings()).get_user_insights(args.user_id)
    finally:
        client.close()

    _print(insights)


async def cmd_analyze_protocol(args):
    """Analyze one protocol"""
    from api.deps import get_settings
    from api.insight_service import InsightService

    client, db = _connect()
    try:
        analysis = await InsightService(db, get_settings()).get_protocol_analysis(
            args.user_id, args.protocol_id
        )
    finally:
        client.close()

    _print(analysis)


def _add_constraint_args(parser, default_risk):
    parser.add_argument("--risk", default=default_risk,
                        choices=["conservative", "moderate", "aggressive"], help="Risk appetite")
    parser.add_argument("--current", action="append", default=[], help="Compound id already in use")
    parser.add_argument("--condition", action="append", default=[], help="User condition")
    parser.add_argument("--max-injections", type=float, default=7, help="Weekly injection limit")
    parser.add_argument("--budget", type=float, help="Monthly budget (USD)")
    parser.add_argument("--user", default="cli", help="User id for logging")


def main():
    parser = argparse.ArgumentParser(
        description="Peptide Protocol Engine CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Seed command
    seed_parser = subparsers.add_parser("seed", help="Seed catalog and demo history")
    seed_parser.add_argument("--no-demo", action="store_true", help="Skip the demo user history")

    # Suggest command
    suggest_parser = subparsers.add_parser("suggest", help="Suggest a protocol")
    suggest_parser.add_argument("--goal", action="append", default=[], help="Goal tag")
    suggest_parser.add_argument("--max-compounds", type=int, default=3, help="Max compounds")
    _add_constraint_args(suggest_parser, "conservative")

    # Personalize command
    personalize_parser = subparsers.add_parser("personalize", help="Personalize a template")
    personalize_parser.add_argument("template_id", help="Template id")
    personalize_parser.add_argument("--max-compounds", type=int, help="Max compounds")
    _add_constraint_args(personalize_parser, None)

    # Insights command
    insights_parser = subparsers.add_parser("insights", help="User insights")
    insights_parser.add_argument("user_id", help="User id")

    # Protocol analysis command
    analyze_parser = subparsers.add_parser("analyze-protocol", help="Protocol analysis")
    analyze_parser.add_argument("user_id", help="User id")
    analyze_parser.add_argument("protocol_id", help="Protocol id")

    args = parser.parse_args()

    if args.command == "seed":
        asyncio.run(cmd_seed(args))
    elif args.command == "suggest":
        asyncio.run(cmd_suggest(args))
    elif args.command == "personalize":
        asyncio.run(cmd_personalize(args))
    elif args.command == "insights":
        asyncio.run(cmd_insights(args))
    elif args.command == "analyze-protocol":
        asyncio.run(cmd_analyze_protocol(args))
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
