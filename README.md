# backplane-upgrade

A small command-line tool that keeps the `ocm-backplane` binary up to date,
plus a helper for turning a managed-script directory into a test-job request.

## Installation

```
pip install .
```

To run the test suite as well:

```
pip install ".[test]"
pytest
```

## Command line

Installing the package provides the `ocm-backplane` command. Run without a
subcommand, it prints its help.

Print the installed version:

```
ocm-backplane version
```

Upgrade to the latest published release:

```
ocm-backplane upgrade
```

The upgrade command first checks that the release server's host name
resolves, then fetches the latest release. If its tag is newer than the
installed version (compared as semantic versions, a leading `v` ignored),
you are asked to confirm with `y`; any other answer cancels. The release
archive matching your operating system and architecture is downloaded, the
`ocm-backplane` file is taken out of the gzipped tarball and written over the
running program's path. The old file is moved aside to a timestamped backup
until the new one is in place, and moved back if writing fails.

Every command accepts `-v`/`--verbosity` with one of `panic`, `fatal`,
`error`, `warning`, `info`, `debug` or `trace`; the default is `warning`.
Errors are logged and the command exits with status 1.

## Library use

The upgrade flow is available without the command line:

```python
from backplane_upgrade.github import GitHubClient
from backplane_upgrade.upgrade import Upgrader

client = GitHubClient()
client.check_connection()
replaced = Upgrader(client).upgrade_plugin("0.1.0")
```

`upgrade_plugin` returns `True` when the binary was replaced and `False` when
no upgrade was available or it was cancelled; failures raise `UpgradeError`.
`Upgrader` takes keyword options `out`, `reader`, `writer`, `binary_name`,
`org` and `repo`.

Any object with `get_latest_version()` and `get_release_archive(release)`
methods can stand in for `GitHubClient`. `GitHubClient` accepts a `base_url`
and a `requests.Session`; a non-200 response raises `RequestFailedError`, and
a release without an asset for this platform raises `ArchiveNotFoundError`.

Other helpers in `backplane_upgrade.upgrade`: `parse_release(data)` reads a
release in the API's JSON form, `should_update(current, latest)` compares
versions, and `extract_binary(archive, binary_name)` pulls one file out of a
`.tar.gz`. In `backplane_upgrade.github`, `OSConfig.find_asset_url(release)`
finds the asset named `ocm-backplane_<version>_<OS>_<arch>.tar.gz`, and
`current_os_config()` describes the running platform.

`backplane_upgrade.writer.SafeWriter` writes a file with the backup-and-restore
step described above and raises `NotAFileError` if the target is a directory.

### Test jobs for managed scripts

`backplane_upgrade.testjob.create_test_script_from_files(directory)` reads
`metadata.yaml` in a script directory (the current directory by default),
loads the script file it names, and returns a `TestScriptRequest` carrying
the metadata and the base64-encoded script body.

`inline_library_source_files(script, script_path)` replaces the first
`source /managed-scripts/<path>` line with the library it names, read from the
`scripts/` directory of the enclosing git repository (found by running
`git rev-parse --show-toplevel`); the library is written to `./lib.sh` with a
heredoc and sourced from there.

## What this package does not do

Only the `upgrade` and `version` commands exist. There are no commands for
logging in to clusters, consoles, cloud credentials, sessions, scripts,
managed jobs or monitoring, and nothing here sends a `TestScriptRequest` to a
server: building the request is as far as the package goes.