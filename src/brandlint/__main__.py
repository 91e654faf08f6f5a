"""brandlintのコマンドラインエントリポイント。

    python -m brandlint lint tree.json --file-path components/ui/Button.tsx
    python -m brandlint config --tenant acme --mode required
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from brandlint.config import EngineConfig
from brandlint.services.engine import create_engine


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="brandlint", description="Brand-aware lint rule engine")
    parser.add_argument("--config-dir", type=Path, default=None, help="Directory holding brands/ and severity.yaml")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    def add_context_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("--tenant", default=None)
        p.add_argument("--mode", choices=["advisory", "required", "brand-aware"], default=None)

    lint = sub.add_parser("lint", help="Lint an ESTree JSON tree and print violations as JSON")
    lint.add_argument("tree", type=Path, help="ESTree JSON produced by the JavaScript parser")
    lint.add_argument("--file-path", required=True, help="Path of the linted file, relative to the project root")
    lint.add_argument("--source", type=Path, default=None, help="Original source text, required for --fix")
    lint.add_argument("--fix", action="store_true", help="Write fixed source back to --source")
    add_context_args(lint)

    config = sub.add_parser("config", help="Print the compiled host linter configuration as JSON")
    config.add_argument("--file-path", default="")
    add_context_args(config)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    config = EngineConfig(config_dir=args.config_dir) if args.config_dir else EngineConfig()
    engine = create_engine(config)
    inputs = {"tenantId": args.tenant, "filePath": args.file_path, "mode": args.mode}

    if args.command == "config":
        json.dump(engine.compile_configuration(inputs).to_dict(), sys.stdout, indent=2)
        sys.stdout.write("\n")
        return 0

    tree = json.loads(args.tree.read_text(encoding="utf-8"))
    if args.fix:
        if args.source is None:
            print("--fix requires --source", file=sys.stderr)
            return 2
        result = engine.lint_source(tree, args.source.read_text(encoding="utf-8"), inputs, apply=True)
        if result.output is not None:
            args.source.write_text(result.output, encoding="utf-8")
        violations = result.violations
    else:
        violations = engine.lint(tree, inputs)

    json.dump([v.to_json_obj() for v in violations], sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")
    return 1 if any(v.severity == "required" for v in violations) else 0


if __name__ == "__main__":
    sys.exit(main())
