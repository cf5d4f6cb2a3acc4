"""
emis-plan - Emergency Response Plans API

    uvicorn emis_plan.main:app
"""

import logging

from . import config
from .app import initialize

# Configure logging
logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

app = initialize()
