# cupi

A client library for administering Cisco Unity Connection servers. It talks
to the CUPI REST interface and fetches log files through the DIME log
collection service.

## Installation

```
pip install .
```

To run the test suite, install the test extra:

```
pip install ".[test]"
pytest
```

## Configuration

`cupi.config` reads and writes server settings in `~/.cupi-cli/config.json`
(another path can be passed to `load_config`, `save_config` and
`set_default_server`):

```json
{
  "defaultServer": "lab",
  "servers": {
    "lab": {
      "host": "cuc.example.com",
      "port": 443,
      "version": "14.0",
      "credentials": {
        "cupi": {"username": "admin"}
      }
    }
  }
}
```

A missing file loads as an empty `Config`. `get_server` and
`set_default_server` raise `ConfigError` for an unknown server name.

Usernames live in the config file. Passwords are kept apart from it by
`cupi.credentials.CredentialStore`, keyed by host and credential type
(`CredType.CUPI`, `CredType.APPLICATION` or `CredType.PLATFORM`). By default
the store writes to a private JSON file, `~/.cupi-cli/keystore.json`, through
`FileKeystore`; any object with `get`, `set` and `delete` methods can be
passed in its place. Entries found in the older `~/.cupi-cli/.credentials`
file are moved into the keystore the first time they are read.

```python
from cupi.config import load_config, get_server
from cupi.credentials import CredentialStore, CredType, resolve_creds

cfg = load_config()
server = get_server(cfg, "lab")
creds = resolve_creds(server, CredType.CUPI, CredentialStore())
```

`resolve_creds` returns a `(username, password)` pair and raises
`CredentialsError` when the type is not configured, has no username, or has
no stored password.

## REST access

`cupi.rest.CupiClient` sends authenticated requests to
`https://<host>:<port>/vmrest<path>`. `get` returns the decoded JSON body,
`post` returns the response text, and `put` and `delete` return nothing.
Any non-2xx reply raises `CupiError`, whose `status` attribute holds the
HTTP status.

```python
from cupi.rest import CupiClient
from cupi.directory import list_alternate_extensions, unlock_credential

client = CupiClient(server.host, server.port, *creds)

for ext in list_alternate_extensions(client, "user-object-id"):
    print(ext.dtmf_access_id, ext.id_index)

unlock_credential(client, "user-object-id", "pin")
```

`cupi.directory` covers alternate names, alternate extensions and user
credentials (PIN or password): listing, fetching, creating, updating and
deleting them, plus `unlock_credential` and `set_credential`.

## Request bodies

`cupi.forms` and `cupi.user_forms` build the field maps sent with `post` and
`put`, and the table rows shown for listed items. Empty values are left out;
a missing required value, or an update with nothing in it, raises
`UsageError`.

```python
from cupi.user_forms import user_add_fields, template_alias

fields = user_add_fields(alias="jsmith", dtmf="1001", first_name="John")
template = template_alias("")   # "voicemailusertemplate"
```

`cupi.forms` covers routing rules and their conditions, search spaces and
their partition members, and the SMTP server and client settings.
`cupi.user_forms` covers users, mailbox quotas and message waiting
indicators.

## Log files

```python
from cupi.dime import get_file

data = get_file(server.host, *creds, "cuc-install.log")
```

A path that does not start with `/var/log` is looked up under
`/var/log/active/`. Both MIME multipart and raw DIME replies are decoded;
failures raise `DimeError`.

## Debugging and certificates

Set the `CUPI_DEBUG` environment variable to print requests and responses to
standard error.

Servers usually present self-signed certificates, so certificate checks are
turned off for connections to them.

## What this package does not do

- It has no command-line program; it is a library to be called from Python.
- It does not query serviceability data such as alerts, disk usage,
  performance counters or services.
- It does not check for or install newer releases of itself.
- It has no functions that send routing rule, search space, SMTP, user,
  mailbox or message waiting indicator requests; `cupi.forms` and
  `cupi.user_forms` only build their bodies and rows, to be sent with
  `CupiClient`.
- It does not use the operating system's keychain; passwords are kept in a
  private JSON file unless another keystore is supplied.