"""Manage your SugarFunge infrastructure in Kubernetes."""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from kubernetes.client.rest import ApiException

from .config import get_settings, load_config
from .dispatch import CliAction, config_section, dispatch
from .errors import OrchestrationError
from .services.orchestration.chain_type import ChainType
from .services.orchestration.kubernetes.client import KubernetesClient
from .services.orchestration.service_kind import ServiceKind

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()

    parser = argparse.ArgumentParser(prog="sfctl", description=__doc__)
    parser.add_argument(
        "action",
        choices=[a.value for a in CliAction],
        help="Action to take on the service",
    )
    parser.add_argument(
        "service",
        choices=[s.value for s in ServiceKind],
        help="Name of the service",
    )
    parser.add_argument(
        "-n", "--namespace",
        default=settings.namespace,
        help="Namespace to apply the action (default: %(default)s)",
    )
    parser.add_argument(
        "--chain",
        choices=[c.value for c in ChainType],
        default=settings.chain,
        help="Chain type to configure (default: %(default)s)",
    )
    parser.add_argument(
        "--config",
        default=settings.config_path or None,
        help="YAML file overriding the default service configuration",
    )
    parser.add_argument(
        "--context",
        default=settings.kube_context or None,
        help="Kubeconfig context (default: in-cluster, then current context)",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Logging level (default: %(default)s)",
    )
    return parser


async def run(args: argparse.Namespace, chain: ChainType) -> None:
    config = load_config(args.config)
    service = ServiceKind.from_string(args.service)

    # A missing section is reported before any cluster configuration is loaded
    config_section(config, service)
    k8s = KubernetesClient(context=args.context)

    await dispatch(k8s, config, CliAction(args.action), service, args.namespace, chain)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Defaults from SFCTL_CHAIN bypass argparse choices
    try:
        chain = ChainType.from_string(args.chain)
    except ValueError as e:
        parser.error(str(e))

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        asyncio.run(run(args, chain))
    except OrchestrationError as e:
        logger.error(f"{args.action} {args.service} failed: {e}")
        return 1
    except ApiException as e:
        logger.error(f"{args.action} {args.service} failed: cluster returned {e.status} {e.reason}: {e.body}")
        return 1
    except RuntimeError as e:
        # Kubernetes configuration could not be loaded
        logger.error(f"{args.action} {args.service} failed: {e}")
        return 1

    logger.info(f"{args.action} {args.service}: done")
    return 0


if __name__ == "__main__":
    sys.exit(main())
