"""Client options and how they are derived from Hadoop configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from .hadoopconf import HadoopConf

DATA_TRANSFER_PROTECTION_AUTHENTICATION = "authentication"
DATA_TRANSFER_PROTECTION_INTEGRITY = "integrity"
DATA_TRANSFER_PROTECTION_PRIVACY = "privacy"

_PROTECTION_LEVELS = (
    DATA_TRANSFER_PROTECTION_AUTHENTICATION,
    DATA_TRANSFER_PROTECTION_INTEGRITY,
    DATA_TRANSFER_PROTECTION_PRIVACY,
)


@dataclass(frozen=True)
class _EmptyKerberosClient:
    """Stands in for a Kerberos client until one with credentials is supplied."""

    credentials: Any = None


@dataclass
class ClientOptions:
    """Configurable options for a client."""

    addresses: list[str] = field(default_factory=list)
    user: str = ""
    use_datanode_hostname: bool = False
    namenode_dial_func: Callable[..., Any] | None = None
    datanode_dial_func: Callable[..., Any] | None = None
    kerberos_client: Any = None
    kerberos_service_principle_name: str = ""
    data_transfer_protection: str = ""


def client_options_from_conf(conf: Mapping[str, str] | None) -> ClientOptions:
    """Build ClientOptions from the relevant keys of a Hadoop configuration.

    If hadoop.security.authentication is kerberos, kerberos_client is set to
    a placeholder without credentials that must be replaced before use.
    """
    conf = HadoopConf(conf or {})
    options = ClientOptions(addresses=conf.namenodes() or [])

    options.use_datanode_hostname = conf.get("dfs.client.use.datanode.hostname", "") == "true"

    if conf.get("hadoop.security.authentication", "").lower() == "kerberos":
        options.kerberos_client = _EmptyKerberosClient()

    principal = conf.get("dfs.namenode.kerberos.principal", "")
    if principal:
        options.kerberos_service_principle_name = principal.split("@")[0]

    # The levels sort alphabetically in increasing strength, so the last
    # recognised one is the highest requested.
    for value in sorted(conf.get("dfs.data.transfer.protection", "").lower().split(",")):
        if value in _PROTECTION_LEVELS:
            options.data_transfer_protection = value

    if conf.get("dfs.encrypt.data.transfer", "").lower() == "true":
        options.data_transfer_protection = DATA_TRANSFER_PROTECTION_PRIVACY

    return options