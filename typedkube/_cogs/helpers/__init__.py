"""
General-purpose helpers not related to the client itself
(neither to the requests nor to the structs),
which are used to prepare and control the runtime environment.

Helpers do not depend on anything else in the package. They do not implement
any entities or behaviours of the K8s API domain, only low-level patterns.
"""
