"""Entry point for tiki."""

import sys

NOUNS = {"init", "sysinfo"}


def run_ui(args) -> int:
    from tiki.config import Paths, load_config, setup_logging

    paths = Paths.for_project(args.project)
    config = load_config(paths)
    setup_logging(args.log_level or config.log_level, paths.log_file)

    if args.target:
        from tiki.ui.viewer import MarkdownViewerApp

        MarkdownViewerApp(args.target).run()
        return 0

    from tiki.context import AppContext
    from tiki.ui import TikiApp

    ctx = AppContext.create(paths.project_root)
    if args.plugin and ctx.plugin(args.plugin) is None:
        print(f"error: unknown view {args.plugin!r}", file=sys.stderr)
        return 1
    app = TikiApp(ctx, start_plugin=args.plugin)
    app.run()
    return app.return_code or 0


def main():
    argv = sys.argv[1:]

    # A subcommand noun selects the CLI; anything else is the board or the viewer
    if argv and argv[0] in NOUNS:
        from tiki.cli import build_parser

        parser = build_parser()
        args = parser.parse_args(argv)
        if not hasattr(args, "func"):
            parser.print_help()
            sys.exit(1)
        sys.exit(args.func(args))

    from tiki.cli import build_tui_parser

    parser = build_tui_parser()
    args = parser.parse_args(argv)
    if args.target and args.plugin:
        parser.error("--plugin cannot be combined with a viewer target")
    sys.exit(run_ui(args))


if __name__ == "__main__":
    main()
