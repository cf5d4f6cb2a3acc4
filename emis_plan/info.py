"""
Package descriptor served at the API root.
"""

from types import MappingProxyType

info = MappingProxyType({
    "name": "emis-plan",
    "description": (
        "A representation of written set of activities and procedures that "
        "outlines what stakeholders and others should do in an emergency "
        "or disaster event."
    ),
    "version": "0.2.0",
    "license": "MIT",
    "homepage": "https://github.com/CodeTanzania/emis-plan",
    "repository": {
        "type": "git",
        "url": "https://github.com/CodeTanzania/emis-plan.git",
    },
    "bugs": {
        "url": "https://github.com/CodeTanzania/emis-plan/issues",
    },
    "sandbox": None,
    "contributors": (
        {
            "name": "lally elias",
            "email": "lallyelias87@gmail.com",
            "url": "https://github.com/lykmapipo",
        },
    ),
})
