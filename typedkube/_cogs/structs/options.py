"""
Per-call options of the client operations, and the functions to set them.

Every operation accepts any number of option functions. A fresh options value
is created for every call, then the functions are applied to it left to right,
each mutating it in place. Only after that, the options are frozen into their
wire-level form: the query parameters, or the request body for deletions.
Both steps are kept apart: the functions never see the wire-level form.

Usage::

    await client.delete(pod, typedkube.grace_period(0), typedkube.dry_run_all)
    await client.list(pods, typedkube.in_namespace('ns1'),
                      typedkube.matching_labels({'app': 'x'}), typedkube.limit(10))

An option function is anything callable with the options value. The functions
below work with any options value which has the relevant fields, and fail
with ``TypeError`` for the values which have no such fields (e.g. a label
selector for a creation).
"""
import dataclasses
import enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, TypeVar

_OptionsT = TypeVar('_OptionsT', bound='Options')

OptionFn = Callable[[Any], None]


class PropagationPolicy(str, enum.Enum):
    ORPHAN = 'Orphan'
    BACKGROUND = 'Background'
    FOREGROUND = 'Foreground'


@dataclasses.dataclass
class Options:
    """ A base for all per-operation options. Not used directly. """

    def apply(self: _OptionsT, fns: Iterable[OptionFn]) -> _OptionsT:
        for fn in fns:
            fn(self)
        return self

    def as_params(self) -> Dict[str, Any]:
        return {}


@dataclasses.dataclass
class CreateOptions(Options):
    dry_run: List[str] = dataclasses.field(default_factory=list)
    field_manager: Optional[str] = None

    def as_params(self) -> Dict[str, Any]:
        return {'dryRun': self.dry_run, 'fieldManager': self.field_manager}


@dataclasses.dataclass
class UpdateOptions(Options):
    dry_run: List[str] = dataclasses.field(default_factory=list)
    field_manager: Optional[str] = None

    def as_params(self) -> Dict[str, Any]:
        return {'dryRun': self.dry_run, 'fieldManager': self.field_manager}


@dataclasses.dataclass
class PatchOptions(Options):
    dry_run: List[str] = dataclasses.field(default_factory=list)
    field_manager: Optional[str] = None
    force: Optional[bool] = None  # only for server-side apply

    def as_params(self) -> Dict[str, Any]:
        return {'dryRun': self.dry_run, 'fieldManager': self.field_manager, 'force': self.force}


@dataclasses.dataclass
class DeleteOptions(Options):
    dry_run: List[str] = dataclasses.field(default_factory=list)
    grace_period_seconds: Optional[int] = None
    propagation_policy: Optional[PropagationPolicy] = None
    precondition_uid: Optional[str] = None
    precondition_resource_version: Optional[str] = None

    def as_body(self) -> Dict[str, Any]:
        """ Freeze into the ``DeleteOptions`` payload, as the API expects it in the body. """
        body: Dict[str, Any] = {'apiVersion': 'v1', 'kind': 'DeleteOptions'}
        if self.dry_run:
            body['dryRun'] = list(self.dry_run)
        if self.grace_period_seconds is not None:
            body['gracePeriodSeconds'] = self.grace_period_seconds
        if self.propagation_policy is not None:
            body['propagationPolicy'] = PropagationPolicy(self.propagation_policy).value
        if self.precondition_uid is not None or self.precondition_resource_version is not None:
            preconditions = body['preconditions'] = {}
            if self.precondition_uid is not None:
                preconditions['uid'] = self.precondition_uid
            if self.precondition_resource_version is not None:
                preconditions['resourceVersion'] = self.precondition_resource_version
        return body


@dataclasses.dataclass
class ListOptions(Options):
    namespace: Optional[str] = None
    label_selector: Dict[str, Optional[str]] = dataclasses.field(default_factory=dict)
    field_selector: Dict[str, str] = dataclasses.field(default_factory=dict)
    limit: Optional[int] = None
    continue_token: Optional[str] = None

    def as_params(self) -> Dict[str, Any]:
        # The namespace is not a parameter: it goes to the URL (if the resource is namespaced).
        return {
            'labelSelector': format_selector(self.label_selector) or None,
            'fieldSelector': format_selector(self.field_selector) or None,
            'limit': self.limit,
            'continue': self.continue_token,
        }


def format_selector(selector: Mapping[str, Optional[str]]) -> str:
    # A key without a value means "has this label", regardless of the value.
    return ','.join(key if val is None else f'{key}={val}' for key, val in selector.items())


def encode_params(params: Mapping[str, Any]) -> List[Tuple[str, str]]:
    """
    Convert the frozen options into the query-string pairs, as the API expects them.

    ``None`` and empty lists mean "not set" and are dropped; booleans are
    lowercased; lists become repeated keys (e.g. ``dryRun=All&dryRun=...``).
    The order of the keys is preserved.
    """
    pairs: List[Tuple[str, str]] = []
    for key, value in params.items():
        values = value if isinstance(value, (list, tuple)) else [value]
        for val in values:
            if val is None:
                continue
            elif isinstance(val, bool):
                pairs.append((key, 'true' if val else 'false'))
            elif isinstance(val, enum.Enum):
                pairs.append((key, str(val.value)))
            else:
                pairs.append((key, str(val)))
    return pairs


#
# The option functions. Those without arguments are the functions themselves,
# those with arguments are the factories of the functions.
#

def _setter(field: str, value: Any) -> OptionFn:
    def fn(options: Any) -> None:
        if not hasattr(options, field):
            raise TypeError(f"{type(options).__name__} does not support {field!r}.")
        setattr(options, field, value)
    fn.__qualname__ = fn.__name__ = f'set_{field}'
    return fn


def _merger(field: str, extra: Mapping[str, Any]) -> OptionFn:
    def fn(options: Any) -> None:
        _setter(field, {**getattr(options, field, {}), **extra})(options)
    fn.__qualname__ = fn.__name__ = f'merge_{field}'
    return fn


def dry_run_all(options: Any) -> None:
    """ Validate the request on the server side, but do not persist anything. """
    _setter('dry_run', ['All'])(options)


def force_ownership(options: Any) -> None:
    """ Take over the conflicting fields from other managers (server-side apply). """
    _setter('force', True)(options)


def field_owner(name: str) -> OptionFn:
    return _setter('field_manager', name)


def grace_period(seconds: int) -> OptionFn:
    return _setter('grace_period_seconds', seconds)


def propagation_policy(policy: PropagationPolicy) -> OptionFn:
    return _setter('propagation_policy', PropagationPolicy(policy))


def preconditions(*, uid: Optional[str] = None, resource_version: Optional[str] = None) -> OptionFn:
    def fn(options: Any) -> None:
        _setter('precondition_uid', uid)(options)
        _setter('precondition_resource_version', resource_version)(options)
    return fn


def in_namespace(namespace: Optional[str]) -> OptionFn:
    return _setter('namespace', namespace)


def matching_labels(labels: Mapping[str, str]) -> OptionFn:
    """ Select only the objects with these labels & values; accumulates if repeated. """
    return _merger('label_selector', labels)


def has_labels(*keys: str) -> OptionFn:
    """ Select only the objects with these labels, regardless of the values. """
    return _merger('label_selector', dict.fromkeys(keys))


def matching_fields(fields: Mapping[str, str]) -> OptionFn:
    return _merger('field_selector', fields)


def limit(count: int) -> OptionFn:
    return _setter('limit', count)


def continue_from(token: Optional[str]) -> OptionFn:
    return _setter('continue_token', token)
