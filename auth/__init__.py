"""auth/ -- Authentication and authorization package for Jobly.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/, users/, or jobs/ (except for type checking).
api/ and users/ import from auth/, not the other way around.
"""
