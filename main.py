import argparse
import sys

import uvicorn
from dotenv import load_dotenv

load_dotenv()

from edgestack.config import AppConfig, StackConfig, SyncConfig, configure_logging
from edgestack.deploy import CloudFrontInvalidator, DeploymentSynchronizer
from edgestack.edge.preview import build_local_stack, create_preview_app
from edgestack.edge.routing import default_route_table
from edgestack.server.bootstrap import bootstrap
from edgestack.storage import S3ObjectStore

_LOGGER = configure_logging()


def cmd_serve(args: argparse.Namespace) -> None:
	cfg = AppConfig()
	handle = bootstrap(cfg)
	uvicorn.run(handle.app, host=cfg.host, port=cfg.port, log_level="debug")


def cmd_preview(args: argparse.Namespace) -> None:
	cfg = AppConfig()
	stack = build_local_stack(args.dist, cfg)
	print(f"Published {len(stack.store.keys())} objects from {args.dist}")
	uvicorn.run(create_preview_app(stack.distribution), host=cfg.host, port=cfg.port)


def cmd_route(args: argparse.Namespace) -> None:
	settings = StackConfig()
	table = default_route_table(api_prefix=settings.api_prefix, entry_document=settings.entry_document)
	rule = table.select(args.path)
	print(f"{args.path}\tpattern={rule.path_pattern}\torigin={rule.origin.value}\tcache={rule.cache_policy.name}")


def cmd_sync(args: argparse.Namespace) -> None:
	cfg = SyncConfig()
	store = S3ObjectStore(cfg.bucket, region=cfg.region)
	invalidator = CloudFrontInvalidator(cfg.distribution_id)
	prune = cfg.prune and not args.no_prune
	result = DeploymentSynchronizer(store, invalidator, prune=prune).sync(args.dist or cfg.web_dist_dir)
	print(f"Uploaded {len(result.uploaded)} objects, pruned {len(result.deleted)}")
	print(f"Invalidation {result.invalidation_id}")


def cmd_synth(args: argparse.Namespace) -> None:
	from edgestack.infra.app import build_app

	assembly = build_app().synth()
	print(f"Synthesized to {assembly.directory}")


def build_arg_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(description="SPA + API edge stack tooling")
	sub = parser.add_subparsers(dest="command", required=True)

	p_srv = sub.add_parser("serve", help="Run the API application locally")
	p_srv.set_defaults(func=cmd_serve)

	p_prev = sub.add_parser("preview", help="Run the whole edge topology in-process")
	p_prev.add_argument("--dist", required=True, help="Static build directory to publish")
	p_prev.set_defaults(func=cmd_preview)

	p_route = sub.add_parser("route", help="Show which route rule a path resolves to")
	p_route.add_argument("path", help="Request path, e.g. /api/users")
	p_route.set_defaults(func=cmd_route)

	p_sync = sub.add_parser("sync", help="Upload the static build and invalidate the distribution")
	p_sync.add_argument("--dist", help="Static build directory (default: WEB_DIST_DIR)")
	p_sync.add_argument("--no-prune", action="store_true", help="Keep objects missing from the build")
	p_sync.set_defaults(func=cmd_sync)

	p_synth = sub.add_parser("synth", help="Synthesize the CloudFormation template")
	p_synth.set_defaults(func=cmd_synth)
	return parser


def main() -> None:
	parser = build_arg_parser()
	args = parser.parse_args()
	if not hasattr(args, "func"):
		parser.print_help(sys.stderr)
		sys.exit(2)
	args.func(args)


if __name__ == "__main__":
	main()
