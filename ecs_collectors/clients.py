"""Client factory: one authenticated ECS client per tenant identity.

A tenant with an empty role uses the ambient credential chain. Otherwise the
role is assumed through STS and the temporary credentials back a fresh
session. Clients are built for a single scrape and never shared.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import boto3
from botocore.client import BaseClient
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from core.retry import is_throttling_error, retry_with_backoff
from ecs_collectors.common import _logger
from ecs_collectors.errors import AuthError
from ecs_toolset import config as const


@dataclass(frozen=True)
class TenantIdentity:
    """An island label and the role used to reach it ('' = ambient credentials)."""

    island: str = ""
    role: str = ""


@retry_with_backoff(
    exceptions=(ClientError,),
    tries=3,
    should_retry=is_throttling_error,
    logger=logging.getLogger("ecs_collectors.clients"),
)
def _assume_role(sts: BaseClient, role_arn: str, session_name: str) -> Dict[str, Any]:
    resp = sts.assume_role(
        RoleArn=role_arn,
        RoleSessionName=session_name,
        DurationSeconds=const.ASSUME_ROLE_DURATION_SECONDS,
    )
    return resp["Credentials"]


def session_for(
    tenant: TenantIdentity,
    region: str,
    *,
    sdk_config: Optional[Config] = None,
    logger: Optional[logging.Logger] = None,
) -> boto3.Session:
    """Return a boto3 session for ``tenant``; raise AuthError on any failure."""
    log = _logger(logger)
    try:
        base = boto3.Session(region_name=region)
        if not tenant.role:
            return base
        sts = base.client("sts", config=sdk_config or const.SDK_CONFIG)
        creds = _assume_role(sts, tenant.role, const.ASSUME_ROLE_SESSION_NAME)
        session = boto3.Session(
            aws_access_key_id=creds["AccessKeyId"],
            aws_secret_access_key=creds["SecretAccessKey"],
            aws_session_token=creds["SessionToken"],
            region_name=region,
        )
    except (ClientError, BotoCoreError) as exc:
        raise AuthError(tenant.island, str(exc), {"role": tenant.role}) from exc
    except KeyError as exc:
        raise AuthError(tenant.island, f"malformed assume_role response: missing {exc}") from exc
    log.debug("[clients] assumed %s for island '%s'", tenant.role, tenant.island)
    return session


def ecs_client_for(
    tenant: TenantIdentity,
    region: str,
    *,
    sdk_config: Optional[Config] = None,
    logger: Optional[logging.Logger] = None,
) -> BaseClient:
    """Build the ECS client a tenant worker owns for the duration of one scrape."""
    session = session_for(tenant, region, sdk_config=sdk_config, logger=logger)
    try:
        return session.client("ecs", region_name=region, config=sdk_config or const.SDK_CONFIG)
    except (ClientError, BotoCoreError) as exc:
        raise AuthError(tenant.island, str(exc)) from exc
