from .connection import get_db, engine, AsyncSessionLocal, init_db, Base

# Import signature models to ensure they are registered with Base
from .signature_models import SignatureDB

__all__ = [
    'get_db', 'engine', 'AsyncSessionLocal', 'init_db', 'Base',
    'SignatureDB',
]
