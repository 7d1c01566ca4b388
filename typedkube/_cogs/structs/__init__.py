"""
All the structures and value types of the client: references to resources
and objects, the objects' bodies, the schemes, the options, and the patches.

All the functions here are purely data-manipulative and computational.
No external calls or any i/o activities are done here.
"""
