# runcfg

Typed access to the configuration a Cloud Run container receives: the
environment variables of services and jobs, the values served by the instance
metadata server, and a logging formatter that writes structured entries in the
shape Cloud Logging expects.

The package has no runtime dependencies.

## Installation

```
pip install runcfg
```

## Services

```python
from runcfg.service import load_service

service = load_service(port=9000, name="local-dev")
print(service.port, service.name, service.revision, service.configuration)
```

`load_service` starts from the defaults (port 8080), applies the keyword
defaults you give, and then overrides them with `PORT`, `K_SERVICE`,
`K_REVISION` and `K_CONFIGURATION` when those are set in the environment.

Each keyword default may be a single value or several candidates; the first
usable one is taken. Port candidates may be integers or strings; zero, empty
strings and strings that are not valid port numbers are skipped, while an
integer outside 0 to 65535 raises `ValueError`.

A `PORT` of `0` raises `InvalidPortError`; a `PORT` that is not a decimal
16-bit number raises an error that is both an `InvalidPortError` and an
`EnvironmentProcessError`. `parse_port(text)` applies the same checks to a
string on its own and returns the port number.

`Service.reload()` re-reads the environment without discarding values the
environment does not set. `Service.env_decode(value)` first restores the
default port when `port` is `0`, then reloads.

## Jobs

```python
from runcfg.job import load_job

job = load_job(task_count=1)
print(job.name, job.execution, job.task_index, job.task_attempt, job.task_count)
```

Values come from `CLOUD_RUN_JOB`, `CLOUD_RUN_EXECUTION`,
`CLOUD_RUN_TASK_INDEX`, `CLOUD_RUN_TASK_ATTEMPT` and `CLOUD_RUN_TASK_COUNT`;
`task_count` defaults to 1 and the other numbers to 0. A task variable that is
not a non-negative 32-bit decimal integer raises `EnvironmentProcessError`.
A numeric keyword default outside the 32-bit unsigned range raises
`ValueError`.

`Job.reload()` re-reads the environment, keeping fields it does not set, and
`Job.env_decode(value)` restores `task_count` to 1 when it is `0` before
reloading.

## Instance metadata

```python
from runcfg.metadata import MetadataField, load_metadata

metadata = load_metadata(MetadataField.PROJECT_ID | MetadataField.REGION)
print(metadata.project_id, metadata.region)
```

`load_metadata` fills a `Metadata` object with the project ID, project number,
region, instance ID and service account e-mail. Each value first comes from the
environment, then from the keyword defaults you pass, and finally from the
metadata server for every field selected by the `MetadataField` flags
(`NONE`, `PROJECT_ID`, `PROJECT_NUMBER`, `REGION`, `INSTANCE_ID`,
`SERVICE_ACCOUNT_EMAIL`, `ALL`). The environment variables checked, in order,
are:

| Field | Variables |
| --- | --- |
| `project_id` | `CLOUDSDK_CORE_PROJECT`, `GOOGLE_CLOUD_PROJECT_ID`, `GCP_PROJECT_ID` |
| `project_number` | `GOOGLE_CLOUD_PROJECT_NUMBER`, `GCP_PROJECT_NUMBER` |
| `region` | `CLOUDSDK_COMPUTE_REGION`, `GOOGLE_CLOUD_REGION`, `GCP_REGION` |
| `instance_id` | `CLOUD_RUN_INSTANCE_ID` |
| `service_account_email` | `GOOGLE_SERVICE_ACCOUNT_EMAIL` |

The selected fields are fetched concurrently. When both the region and the
project number are requested, both are taken from the single
`instance/region` answer. Any failed request raises `MetadataFetchError`.

Requests go through a `MetadataClient`. By default it talks to the host named
by `GCE_METADATA_HOST`, or `169.254.169.254`, with a 5 second timeout and no
proxy. Pass your own `client=` to point at another server or to stub it out in
tests. The client offers `get(path)`, `project_id()`, `numeric_project_id()`,
`instance_id()` and `email(service_account)`.

`default_metadata()` returns the values found in the environment alone.
`Metadata.reload(fields, client)` fetches the selected fields into an existing
object, and `Metadata.env_decode(value, client)` fills empty fields from the
environment and fetches from the server only those still empty after that.

## Structured logging

```python
import logging

from runcfg.cloudlogging import SpanContext, current_span, hook

handler = logging.StreamHandler()
handler.setFormatter(hook("my-project"))
logging.getLogger().addHandler(handler)

span = SpanContext("4bf92f3577b34da6a3ce929d0e0e4736", "00f067aa0ba902b7", sampled=True)
with current_span(span):
    logging.getLogger().warning("linked to a trace")
```

The formatter returned by `hook` is a `CloudLoggingFormatter`. It writes one
JSON object per record with:

- `severity`, mapped from the Python level by `severity_for_level`: `DEBUG`,
  `INFO`, `WARNING`, `ERROR` and `CRITICAL` for the standard levels, `ALERT`
  for levels above `CRITICAL`, and `DEFAULT` for anything else;
- `time`, an RFC 3339 UTC timestamp with microseconds, and `message`;
- any extra attributes passed to the logging call, plus `error` and
  `stack_trace` when exception or stack information is attached;
- `logging.googleapis.com/sourceLocation` with the file, line and function of
  the call;
- when a valid `SpanContext` is active through `current_span`, or given as the
  record's `span_context` extra, the `logging.googleapis.com/trace`,
  `logging.googleapis.com/spanId` and `logging.googleapis.com/trace_sampled`
  fields.

`SpanContext` takes a 32-digit hexadecimal trace ID and a 16-digit span ID,
lower-cases them, and raises `ValueError` for anything else; a span whose IDs
are all zeros is not valid and adds no trace fields.

## Errors

All errors derive from `RuncfgError` (in `runcfg.errors`):

- `EnvironmentProcessError`: an environment variable could not be processed.
- `InvalidPortError`: `PORT` is not a port number from 1 to 65535.
- `MetadataFetchError`: the metadata server could not be reached or answered
  with an error.

## Helpers

In `runcfg.env`, `get_first_env(*names)` returns the first non-empty value
among the named environment variables, or an empty string when none is set.
`first_non_empty(*values)` returns the first truthy value among plain values,
or `None` when there is none.

## What this package does not do

It does not set up tracing: there is no tracer provider, span exporter or
telemetry resource here. Span identities for log entries must be supplied by
your own code through `SpanContext`.