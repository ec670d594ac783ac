"""
A thin client to the K8s API: only what is needed to query the pods' readiness.

Everything goes through an explicitly passed `auth.APIContext`
(an aiohttp session with the credentials applied), never via global state.
"""
