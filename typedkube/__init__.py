"""
The main typedkube module for all the exported functions & classes.
"""
# isort: skip_file

# Unlike all other places, where we import other modules and refer
# the functions via the modules, this is the library's top-level interface,
# as it is seen by the users. So, we export the individual functions.

from typedkube._cogs.clients.auth import (
    APIContext,
)
from typedkube._cogs.clients.errors import (
    ClientError,
    TypeNotRegisteredError,
    NoResourceMatchError,
    PatchEncodingError,
    DecodeError,
    InvalidRequestError,
    APIError,
    APIClientError,
    APIServerError,
    APIUnauthorizedError,
    APIForbiddenError,
    APINotFoundError,
    APIConflictError,
)
from typedkube._cogs.clients.generic import (
    Client,
    StatusWriter,
)
from typedkube._cogs.clients.mapping import (
    RESTMapper,
    StaticRESTMapper,
    DiscoveryRESTMapper,
)
from typedkube._cogs.clients.resolving import (
    ObjectMeta,
    Resolver,
    MetadataCache,
)
from typedkube._cogs.configs.configuration import (
    ClientSettings,
    NetworkingSettings,
)
from typedkube._cogs.helpers.loggers import (
    configure,
    LogFormat,
)
from typedkube._cogs.helpers.typedefs import (
    Logger,
)
from typedkube._cogs.helpers.versions import (
    version as __version__,
)
from typedkube._cogs.structs.bodies import (
    RawBody,
    RawList,
    Labels,
    Annotations,
    Object,
    ObjectList,
)
from typedkube._cogs.structs.credentials import (
    ConnectionInfoError,
    ConnectionInfo,
)
from typedkube._cogs.structs.options import (
    OptionFn,
    PropagationPolicy,
    CreateOptions,
    UpdateOptions,
    PatchOptions,
    DeleteOptions,
    ListOptions,
    dry_run_all,
    force_ownership,
    field_owner,
    grace_period,
    propagation_policy,
    preconditions,
    in_namespace,
    matching_labels,
    has_labels,
    matching_fields,
    limit,
    continue_from,
)
from typedkube._cogs.structs.patches import (
    PatchType,
    Patch,
    RawPatch,
    MergeFrom,
    JSONPatchFrom,
    ApplyPatch,
)
from typedkube._cogs.structs.references import (
    GroupVersionKind,
    ObjectKey,
    Resource,
)
from typedkube._cogs.structs.schemes import (
    Scheme,
    make_default_scheme,
    Namespace,
    NamespaceList,
    Node,
    NodeList,
    Pod,
    PodList,
    ConfigMap,
    ConfigMapList,
    Secret,
    SecretList,
    Service,
    ServiceList,
    Deployment,
    DeploymentList,
)

__all__ = [
    'Client', 'StatusWriter',
    'APIContext',
    'ConnectionInfo', 'ConnectionInfoError',
    'ClientSettings', 'NetworkingSettings',
    'configure', 'LogFormat',
    'Logger',
    'RawBody', 'RawList', 'Labels', 'Annotations',
    'Object', 'ObjectList',
    'GroupVersionKind', 'ObjectKey', 'Resource',
    'Scheme', 'make_default_scheme',
    'Namespace', 'NamespaceList',
    'Node', 'NodeList',
    'Pod', 'PodList',
    'ConfigMap', 'ConfigMapList',
    'Secret', 'SecretList',
    'Service', 'ServiceList',
    'Deployment', 'DeploymentList',
    'RESTMapper', 'StaticRESTMapper', 'DiscoveryRESTMapper',
    'ObjectMeta', 'Resolver', 'MetadataCache',
    'OptionFn',
    'PropagationPolicy',
    'CreateOptions', 'UpdateOptions', 'PatchOptions', 'DeleteOptions', 'ListOptions',
    'dry_run_all', 'force_ownership', 'field_owner',
    'grace_period', 'propagation_policy', 'preconditions',
    'in_namespace', 'matching_labels', 'has_labels', 'matching_fields',
    'limit', 'continue_from',
    'PatchType', 'Patch', 'RawPatch', 'MergeFrom', 'JSONPatchFrom', 'ApplyPatch',
    'ClientError',
    'TypeNotRegisteredError',
    'NoResourceMatchError',
    'PatchEncodingError',
    'DecodeError',
    'InvalidRequestError',
    'APIError',
    'APIClientError',
    'APIServerError',
    'APIUnauthorizedError',
    'APIForbiddenError',
    'APINotFoundError',
    'APIConflictError',
]
