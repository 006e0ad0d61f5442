import pytest

from hdfslite.hadoopconf import HadoopConf, load, load_from_environment


def _write_conf(directory, filename, props):
    directory.mkdir(parents=True, exist_ok=True)
    body = "".join(
        f"<property><name>{name}</name><value>{value}</value></property>"
        for name, value in props.items()
    )
    (directory / filename).write_text(f"<?xml version=\"1.0\"?><configuration>{body}</configuration>")


@pytest.fixture
def hadoop_dirs(tmp_path):
    home = tmp_path / "home"
    _write_conf(
        home / "conf",
        "core-site.xml",
        {"fs.defaultFS": "hdfs://cluster"},
    )
    _write_conf(
        home / "conf",
        "hdfs-site.xml",
        {
            "dfs.ha.namenodes.cluster": "nn1,nn2",
            "dfs.namenode.rpc-address.cluster.nn1": "namenode1:8020",
            "dfs.namenode.rpc-address.cluster.nn2": "namenode2:8020",
        },
    )
    conf2 = tmp_path / "conf2"
    _write_conf(conf2, "core-site.xml", {"fs.defaultFS": "hdfs://namenode3:8020"})
    return home, conf2


def test_conf_fallback(hadoop_dirs, monkeypatch):
    home, conf2 = hadoop_dirs
    monkeypatch.setenv("HADOOP_HOME", str(home))
    monkeypatch.setenv("HADOOP_CONF_DIR", str(conf2))

    conf = load_from_environment()
    assert conf.namenodes() == ["namenode3:8020"]

    monkeypatch.delenv("HADOOP_CONF_DIR")
    conf = load_from_environment()
    assert conf.namenodes() == ["namenode1:8020", "namenode2:8020"]


def test_conf_dir_without_files_falls_back_to_home(hadoop_dirs, monkeypatch, tmp_path):
    home, _ = hadoop_dirs
    empty = tmp_path / "empty"
    empty.mkdir()
    monkeypatch.setenv("HADOOP_HOME", str(home))
    monkeypatch.setenv("HADOOP_CONF_DIR", str(empty))

    conf = load_from_environment()
    assert conf.namenodes() == ["namenode1:8020", "namenode2:8020"]


def test_load_from_environment_nothing_found(monkeypatch):
    monkeypatch.delenv("HADOOP_HOME", raising=False)
    monkeypatch.delenv("HADOOP_CONF_DIR", raising=False)
    assert load_from_environment() is None


def test_load_missing_directory_returns_none(tmp_path):
    assert load(tmp_path / "nowhere") is None


def test_load_later_files_override_earlier(tmp_path):
    _write_conf(tmp_path, "core-site.xml", {"a": "core", "b": "core"})
    _write_conf(tmp_path, "hdfs-site.xml", {"a": "hdfs"})
    conf = load(tmp_path)
    assert conf == {"a": "hdfs", "b": "core"}


def test_load_invalid_xml_raises(tmp_path):
    (tmp_path / "core-site.xml").write_text("<configuration><property>")
    with pytest.raises(ValueError) as info:
        load(tmp_path)
    assert str(tmp_path) in str(info.value)


def test_namenodes_deduped_and_sorted():
    conf = HadoopConf(
        {
            "fs.default.name": "hdfs://b:8020",
            "dfs.namenode.rpc-address.x": "b:8020",
            "dfs.namenode.rpc-address.y": "a:8020",
        }
    )
    assert conf.namenodes() == ["a:8020", "b:8020"]


def test_namenodes_empty_is_none():
    assert HadoopConf().namenodes() is None
    assert HadoopConf({"unrelated": "value"}).namenodes() is None