"""
Plain data structures of the readiness domain: components, requests,
outcomes, credentials.

All of them are purely data-holding and computational.
No external calls or any i/o activities are done here.
"""
