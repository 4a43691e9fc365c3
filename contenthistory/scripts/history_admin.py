"""
Outil d'administration de l'historique des versions.

Liste, supprime ou bascule "keep forever" sur les versions d'un élément de contenu, en
appliquant les mêmes règles d'autorisation que l'application (acteur super-utilisateur par
défaut, `--actor-id` pour agir au nom d'un utilisateur).
"""

from __future__ import annotations

import argparse
import sys

from contenthistory.core.container import container
from contenthistory.core.logging import setup_logging
from contenthistory.domain.errors import ContentHistoryError
from contenthistory.domain.history import Actor, ListingStatus
from contenthistory.infra.repo.content_type_repo import ContentTypeRegistry
from contenthistory.infra.repo.db import session_scope
from contenthistory.infra.session_state import InMemorySessionState


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Content history administration")
    parser.add_argument("--actor-id", type=int, default=0, help="Act as this user id")
    parser.add_argument("--type-alias", required=True, help="Type alias, e.g. com_content.article")
    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="List versions of an item")
    p_list.add_argument("item_id", type=int)
    p_list.add_argument("--ordering", default=None)
    p_list.add_argument("--direction", default=None)

    for name in ("delete", "keep"):
        p = sub.add_parser(name, help=f"{name} versions by id")
        p.add_argument("version_ids", type=int, nargs="+")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Point d'entrée: retourne le code de sortie du processus."""
    args = build_parser().parse_args(argv)
    setup_logging(container.settings.LOG_LEVEL)

    actor = Actor(id=args.actor_id, name="cli", is_super_user=args.actor_id == 0)
    with session_scope(container.engine) as session:
        try:
            type_id = ContentTypeRegistry(session).get_type_id(args.type_alias)
            if type_id is None:
                print(f"unknown type alias: {args.type_alias}", file=sys.stderr)
                return 2
            params = {
                "type_alias": args.type_alias,
                "type_id": type_id,
                "item_id": getattr(args, "item_id", 0),
                "list_ordering": getattr(args, "ordering", None),
                "list_direction": getattr(args, "direction", None),
            }
            service = container.history_service(session, actor, params, InMemorySessionState())
            if args.command == "list":
                service.populate_state()
                listing = service.list_for_display()
                if listing.status is ListingStatus.DENIED:
                    print(listing.message, file=sys.stderr)
                    return 1
                for v in listing.items:
                    current = "*" if v.sha1_hash and v.sha1_hash == service.state.sha1_hash else " "
                    keep = "K" if v.keep_forever else " "
                    print(f"{current}{keep} {v.version_id}\t{v.save_date}\t{v.editor or ''}\t{v.note}")
                return 0
            result = service.delete(args.version_ids) if args.command == "delete" else service.keep(
                args.version_ids
            )
        except ContentHistoryError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1
        print(f"{args.command}: applied={result.applied} pruned={result.pruned}")
        for message, severity in service.diagnostics.drain():
            print(f"{severity}: {message}", file=sys.stderr)
    return 0


if __name__ == "__main__":  # pragma: no cover - script entry
    raise SystemExit(main())
