# hdfslite

A client library for HDFS whose interface follows Python's own file and `os`
conventions, with a small command-line tool on top. It has no dependencies
beyond the standard library.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Reading Hadoop configuration

`hdfslite.hadoopconf` reads `core-site.xml`, `hdfs-site.xml` and
`mapred-site.xml` from a configuration directory into a `HadoopConf`, a
`dict` of property names to values.

```python
from hdfslite.hadoopconf import load, load_from_environment

conf = load_from_environment()   # HADOOP_CONF_DIR, then $HADOOP_HOME/conf
if conf is not None:
    print(conf.namenodes())      # sorted, de-duplicated namenode addresses

conf = load("/etc/hadoop/conf")
```

`namenodes()` collects hosts from `fs.defaultFS` (or `fs.default.name`) and
from `dfs.namenode.rpc-address.*` keys, leaves out logical cluster names
listed by `dfs.ha.namenodes.*`, and returns `None` when it finds none.

`load` and `load_from_environment` return `None` when no configuration files
are found. `load` raises `OSError` when a file exists but cannot be read and
`ValueError` when it cannot be parsed.

## Client options

`client_options_from_conf` turns a configuration into a `ClientOptions`
dataclass: namenode addresses, whether to reach datanodes by hostname
(`dfs.client.use.datanode.hostname`), the Kerberos service principal name
(with the realm removed) and the data transfer protection level
(`authentication`, `integrity` or `privacy`; the highest one listed wins, and
`dfs.encrypt.data.transfer=true` forces `privacy`).

```python
from hdfslite.options import client_options_from_conf

options = client_options_from_conf(conf)
```

When `hadoop.security.authentication` is `kerberos`, `kerberos_client` is set
to a placeholder without credentials. A `Client` built with such options
raises `ValueError` until it is replaced by a client that has credentials and
`kerberos_service_principle_name` is set.

## Working with files

`hdfslite.client.Client` is built from a namenode connection, optional
`ClientOptions` and a datanode helper:

- the namenode object provides `execute(method, request)` returning a
  response mapping, plus `user`, `client_name` and `close()`;
- the datanode object provides `open_block(block, offset)`,
  `read_checksum(block, deadline)` and
  `open_block_writer(block, block_size, offset, append)`.

```python
from hdfslite.client import Client

with Client(namenode, options, datanodes) as client:
    data = client.read_file("/data/foo.txt")
    for info in client.read_dir("/data"):
        print(info.mode_string, info.owner, info.size, info.name)
```

`Client` offers `user`, `name`, `open`, `stat`, `read_dir`, `create`,
`create_file`, `append`, `create_empty_file`, `get_content_summary`,
`read_file`, `copy_to_local`, `copy_to_remote` and `close`. New files made by
`create` and `create_empty_file` get mode 0644 and the server's default
replication and block size.

`open` returns a `FileReader`, which supports `read`, `read_at`, `seek`,
`tell`, `stat`, `readdir`, `readdirnames`, `checksum` (HDFS's
MD5-of-MD5-of-CRC32C), `set_deadline` and use as a context manager. `read`
returns an empty `bytes` at the end of the file; `readdir(n)` with `n > 0`
returns batches and an empty list at the end. Entries are `FileInfo` values
with `name`, `size`, `mode`, `mod_time`, `access_time`, `owner`, `group`,
`is_dir` and `mode_string`.

`create`, `create_file` and `append` return a `FileWriter` with `write`,
`flush`, `set_deadline` and `close`, also usable as a context manager. Always
close a writer: data is only complete on the cluster once `close` returns.

`get_content_summary` returns a `ContentSummary` with `size`,
`size_after_replication`, `file_count`, `directory_count`, `name_quota` and
`space_quota`.

## Errors

Exceptions from the cluster are `hdfslite.errors.RemoteError`, carrying
`method`, `desc`, `exception` (the Java class name) and `message`. Failures on
a path raise `HdfsPathError`, which records `op`, `path` and the underlying
`err`. Known remote exceptions are mapped onto Python's built-in errors: a
missing file becomes `FileNotFoundError`, an access control failure
`PermissionError`, an existing file or one being created `FileExistsError`,
and a non-empty directory an `OSError` with `ENOTEMPTY`. The `HdfsPathError`
raised is also an instance of the matching built-in class, so
`except FileNotFoundError` works as expected. Reading from a closed
`FileReader` or writing to a closed `FileWriter` raises `ValueError`.

## Command line

```
hdfslite help
hdfslite --version
hdfslite cat SOURCE...
hdfslite head [-n LINES | -c BYTES] SOURCE...
hdfslite tail [-n LINES | -c BYTES] SOURCE...
hdfslite checksum FILE...
```

Paths may be absolute, relative to `/user/<user>`, or full
`hdfs://namenode:port/path` URLs, and may contain `*`, `?` and `[...]`
globs. The namenode comes from the URL, from `HADOOP_NAMENODE`, or from the
Hadoop configuration; the user from `HADOOP_USER_NAME` or the current login.
`head` and `tail` print ten lines when neither `-n` nor `-c` is given.

The helpers behind these commands live in `hdfslite.cli`: `format_bytes`,
path handling in `hdfslite.cli.paths` (`normalize_paths`, `has_glob`,
`expand_globs`, `expand_paths`), the `cat`, `print_section`, `head_lines`,
`tail_lines` and `checksum` functions, and shell completion in
`hdfslite.cli.complete`. They take any object with the `Client` interface.

## What this package does not do

hdfslite does not contain the namenode RPC or datanode transfer protocol.
The `Client` works with whatever namenode and datanode objects it is given,
but the package ships none that talk to a real cluster, and it has no
Kerberos or SASL support of its own. Because of this, the `cat`, `head`,
`tail` and `checksum` commands stop with "Couldn't connect to namenode" once
they have worked out the namenode and user; `help` and `--version` work on
their own. The tool also has no `ls`, `rm`, `mv`, `mkdir`, `touch`, `chmod`,
`chown`, `du`, `df`, `get`, `getmerge` or `put` commands.