# api/models/activities.py
from pydantic import BaseModel


class ProxyError(BaseModel):
    """Réponse générique renvoyée quand l'appel à Strava échoue"""

    error: str
