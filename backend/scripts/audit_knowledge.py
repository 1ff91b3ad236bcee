#!/usr/bin/env python3
"""
Audit the knowledge base teammate graph.

Reports teammate edges that point at unknown characters (dropped at load
time) and one-way edges, where A rates B but B has no entry for A. One-way
edges are often intentional but are worth a second look after data edits.

Usage:
    uv run python backend/scripts/audit_knowledge.py --knowledge-dir knowledge
    uv run python backend/scripts/audit_knowledge.py --json
"""

import argparse
import json
import logging
from pathlib import Path

from starguide.repositories.knowledge_base import KnowledgeBase
from starguide.services.synergy_service import SynergyService


def main():
    parser = argparse.ArgumentParser(description="Audit knowledge base teammate edges")
    parser.add_argument("--knowledge-dir", type=Path, default=None,
                        help="Knowledge directory (default: repository knowledge/)")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    args = parser.parse_args()

    logging.basicConfig(level=logging.ERROR)

    knowledge_base = KnowledgeBase(args.knowledge_dir)
    synergy = SynergyService(knowledge_base)
    one_way = synergy.find_one_way_edges()

    if args.json:
        print(json.dumps({
            "knowledge_version": knowledge_base.version,
            "characters": len(knowledge_base.characters),
            "dropped_edges": knowledge_base.dropped_edges,
            "one_way_edges": one_way,
        }, indent=2))
        return

    print(f"Knowledge base {knowledge_base.version}: {len(knowledge_base.characters)} characters")

    print(f"\nDropped edges ({len(knowledge_base.dropped_edges)}):")
    for edge in knowledge_base.dropped_edges:
        where = f" [{edge['composition_id']}]" if edge["composition_id"] else ""
        print(f"  {edge['character_id']} -> {edge['teammate_id']} ({edge['category']}){where}")

    print(f"\nOne-way edges ({len(one_way)}):")
    for edge in one_way:
        print(f"  {edge['from']} -> {edge['to']} ({edge['category']}, {edge['rating']})")


if __name__ == "__main__":
    main()
