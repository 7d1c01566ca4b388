"""
All the routines to talk to the Kubernetes API.

The low-level transport is in :mod:`api` (``aiohttp`` underneath), the errors
are in :mod:`errors`. On top of them: the discovery of resources (:mod:`scanning`,
:mod:`mapping`), the resolution of the objects' kinds to resources with caching
(:mod:`resolving`), the assembly of the requests (:mod:`requests`), and finally
the generic client operations for any registered kinds (:mod:`generic`).
"""
