# topicctl

Declarative configuration for Kafka topics and ACLs: data models, validation,
YAML loading and output, plus data types and plain-text tables for consumer
groups and a parser for interactive commands.

## Modules

- `topicctl.config.meta`
  - `ResourceMeta`: name, cluster, region, environment, description, labels
    and consumers. `validate()` requires name, cluster, region and
    environment; `from_dict()` rejects unknown fields; `to_dict()` leaves out
    empty consumers.
  - `ValidationError`: a `ValueError` whose `errors` attribute lists every
    problem found.
- `topicctl.config.settings`
  - `TopicSettings`: a `dict` of topic settings.
    - `validate()` checks each key against the known topic settings
      (`cleanup.policy`, `retention.ms`, `min.insync.replicas`, ...) and its
      value against that setting's rules; empty values are skipped.
    - `to_config_entries(keys)` returns `ConfigEntry` objects for the given
      keys, or for all keys when `keys` is `None`.
    - `get_value_str(key)` returns the value as a string.
    - `config_map_diffs(config_map)` returns the keys whose values differ
      from a cluster's string map, and the cluster's keys not set here.
    - `reduce_retention_drop(config_map, retention_drop_step)` raises the
      desired `retention.ms` so that it drops by at most one `timedelta`
      step from the cluster's current value; it returns whether it changed
      anything.
    - `copy()` and `TopicSettings.from_config_map(config_map)`.
  - `value_to_string(value)` renders booleans, numbers (floats with a
    fractional part to two decimals), strings and lists (joined with commas).
    `value_to_int(value)` converts to an integer, truncating floats.
- `topicctl.config.topic`
  - `TopicConfig` with `TopicSpec`, `TopicPlacementConfig`,
    `TopicMigrationConfig` and the enums `PlacementStrategy` and
    `PickerMethod`.
  - `set_defaults()` sets a partition batch size of 1 and the `randomized`
    picker where unset; `validate(num_racks)` checks meta, partitions,
    replication factor, settings, retention and placement;
    `to_new_topic_config()` builds a `NewTopicConfig` whose config entries
    include `retention.ms` computed from `retentionMinutes`;
    `to_dict()`, `to_yaml()` and `TopicConfig.from_dict(data)`.
- `topicctl.config.acl`
  - `ACLConfig` with `ACLSpec`, `ACL`, `ACLResource` and the enums
    `ResourceType`, `PatternType`, `ACLOperationType` and
    `ACLPermissionType`. In YAML these enums are written by name, in any
    case (`Topic`, `literal`, `Read`, ...); unrecognised names become
    `UNKNOWN`.
  - `to_new_acl_entries()` expands each ACL into one `ACLEntry` per
    operation; `set_defaults()` sets host `*` and permission `ALLOW` where
    unset; `validate()` rejects unknown types and operations and empty names
    and principals.
- `topicctl.config.load`
  - `load_topics_file(path)` and `load_acls_file(path)` read a YAML file that
    may hold several documents separated by `---` lines, expand `$VAR` and
    `${VAR}` from the environment (unset variables become empty), and skip
    documents that are blank or only comments.
  - `load_topic_bytes(contents)` and `load_acl_bytes(contents)` load a single
    document. Unknown fields raise `ValueError`. Numbers under topic
    `settings` are loaded as floats.
  - `check_consistency(resource_meta, cluster_meta)` raises
    `ValidationError` unless the resource's cluster, environment and region
    match the `name`, `environment` and `region` attributes of
    `cluster_meta`.
- `topicctl.groups.types`: `GroupCoordinator`, `GroupDetails`
  (`topics_map()`, `partition_members(topic)`), `MemberInfo` (`topics()`),
  `MemberPartitionLag` (`offset_lag()`, `time_lag()`) and
  `ResetOffsetsStrategy` (`latest`, `earliest`).
- `topicctl.groups.format`: `format_group_coordinators`,
  `format_member_partition_counts` and `format_partition_offsets` render
  plain-text tables.
- `topicctl.cli.command`: `parse_repl_inputs(text)` splits a line into a
  `ReplCommand` of arguments and `--key[=value]` flags (the first word is
  always an argument); `ReplCommand.get_bool_value(key)` and
  `ReplCommand.check_args(min_args, max_args, allowed_flags)`, which raises
  `CommandError`.

## Installation

```
pip install .
```

## Examples

Load, check and print topic configs:

```python
from topicctl.config.load import load_topics_file

for topic in load_topics_file("topics/my-topic.yaml"):
    topic.set_defaults()
    topic.validate(3)  # raises ValidationError listing every problem
    print(topic.to_yaml())
```

A topic config file:

```yaml
meta:
  name: my-topic
  cluster: my-cluster
  region: us-west-2
  environment: staging
  description: An example topic
spec:
  partitions: 9
  replicationFactor: 2
  retentionMinutes: 100
  placement:
    strategy: in-rack
  settings:
    cleanup.policy: compact
```

An ACL config file:

```yaml
meta:
  name: my-acls
  cluster: my-cluster
  region: us-west-2
  environment: staging
spec:
  acls:
    - resource:
        type: topic
        name: my-topic
        patternType: literal
        principal: User:example
      operations:
        - read
        - describe
```

Check a resource against a cluster:

```python
from types import SimpleNamespace
from topicctl.config.load import check_consistency, load_acls_file

cluster = SimpleNamespace(name="my-cluster", environment="staging", region="us-west-2")
for acl_config in load_acls_file("acls/my-acls.yaml"):
    acl_config.set_defaults()
    acl_config.validate()
    check_consistency(acl_config.meta, cluster)
    for entry in acl_config.to_new_acl_entries():
        print(entry)
```

Parse an interactive command:

```python
from topicctl.cli.command import parse_repl_inputs

command = parse_repl_inputs("get brokers --full")
command.check_args(2, 2, {"full"})
assert command.args == ["get", "brokers"]
assert command.get_bool_value("full")
```

## What this package does not do

It has no client for a Kafka cluster. It does not create, apply or delete
topics or ACLs, fetch consumer groups, lags or offsets, or reset offsets;
the group types and tables work on data you supply. There is no cluster
config model or loader (`check_consistency` takes any object with `name`,
`environment` and `region` attributes), no command-line program and no
interactive shell, only the command parser described above.

## Running the tests

```
pip install .[test]
pytest
```