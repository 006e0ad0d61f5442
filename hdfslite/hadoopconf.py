"""Reading and interpreting Hadoop XML configuration files."""

from __future__ import annotations

import os
from pathlib import Path
from urllib.parse import urlsplit
from xml.etree import ElementTree

CONF_FILES = ("core-site.xml", "hdfs-site.xml", "mapred-site.xml")

_RPC_ADDRESS_PREFIX = "dfs.namenode.rpc-address."
_HA_NAMENODES_PREFIX = "dfs.ha.namenodes."


def _url_host(value: str) -> str | None:
    """Return the host (with port) of a URL, without any user information."""
    try:
        netloc = urlsplit(value).netloc
    except ValueError:
        return None
    return netloc.rpartition("@")[2]


class HadoopConf(dict):
    """All key/value pairs found in a set of Hadoop configuration files."""

    def namenodes(self) -> list[str] | None:
        """Return the sorted, deduplicated namenode addresses, or None.

        Addresses come from fs.defaultFS (or fs.default.name) and from keys
        starting with dfs.namenode.rpc-address. Logical cluster names named by
        dfs.ha.namenodes.<cluster> keys are left out.
        """
        addresses: set[str] = set()
        cluster_names: list[str] = []

        for key, value in self.items():
            if "fs.default" in key:
                host = _url_host(value)
                if host is not None:
                    addresses.add(host)
            elif key.startswith(_RPC_ADDRESS_PREFIX):
                addresses.add(value)
            elif key.startswith(_HA_NAMENODES_PREFIX):
                cluster_names.append(key[len(_HA_NAMENODES_PREFIX):])

        addresses.difference_update(cluster_names)
        return sorted(addresses) or None


def load(path: str | os.PathLike) -> HadoopConf | None:
    """Load core-site.xml, hdfs-site.xml and mapred-site.xml from a directory.

    Returns None if none of the files exist. Raises OSError if a file cannot
    be read and ValueError if one cannot be parsed.
    """
    conf: HadoopConf | None = None
    directory = Path(path)

    for filename in CONF_FILES:
        try:
            data = (directory / filename).read_bytes()
        except FileNotFoundError:
            continue

        try:
            root = ElementTree.fromstring(data)
        except ElementTree.ParseError as exc:
            raise ValueError(f"{path}: {exc}") from exc

        if conf is None:
            conf = HadoopConf()

        for prop in root.findall("property"):
            conf[prop.findtext("name", default="")] = prop.findtext("value", default="")

    return conf


def load_from_environment() -> HadoopConf | None:
    """Load configuration from HADOOP_CONF_DIR, or else $HADOOP_HOME/conf.

    Returns None if no configuration can be found in either place.
    """
    conf_dir = os.environ.get("HADOOP_CONF_DIR", "")
    if conf_dir:
        conf = load(conf_dir)
        if conf is not None:
            return conf

    hadoop_home = os.environ.get("HADOOP_HOME", "")
    if hadoop_home:
        conf = load(os.path.join(hadoop_home, "conf"))
        if conf is not None:
            return conf

    return None