from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .dates import parse_start_date


class RawActivity(BaseModel):
    """Activité telle que renvoyée par /athlete/activities (champs utiles seulement)"""

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str = Field("", description="Type de sport, clé de regroupement")
    distance: float = Field(0.0, description="Distance en mètres")
    total_elevation_gain: float = Field(0.0, description="Dénivelé positif en m")
    moving_time: int = Field(0, description="Temps de mouvement en secondes")
    start_date: datetime = Field(..., description="Date de début de l'activité")

    @field_validator("type", mode="before")
    @classmethod
    def _none_type_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("distance", "total_elevation_gain", "moving_time", mode="before")
    @classmethod
    def _none_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("start_date", mode="before")
    @classmethod
    def _parse_start_date(cls, value: Any) -> datetime:
        return parse_start_date(value)


class SeriesPoint(BaseModel):
    """Point d'un graphique par sport"""

    model_config = ConfigDict(frozen=True)

    date: str = Field(..., description="Date affichée (M/D/YYYY)")
    distance_km: float = Field(..., description="Distance en km, arrondie à 2 décimales")
    elevation_m: float = Field(..., description="Dénivelé en m, arrondi à 2 décimales")


class SportSummary(BaseModel):
    """Statistiques agrégées pour un type de sport"""

    model_config = ConfigDict(frozen=True)

    sport: str = Field(..., description="Type de sport")
    total_distance_km: float = Field(..., description="Distance totale en km")
    total_elevation_m: float = Field(..., description="Dénivelé total en m")
    total_duration_hours: float = Field(..., description="Durée totale en heures")
    count: int = Field(..., ge=0, description="Nombre d'activités")
    average_speed_km_h: Optional[float] = Field(
        None, description="Vitesse moyenne km/h, None si la durée totale est nulle"
    )
    recent_series: List[SeriesPoint] = Field(
        default_factory=list,
        description="Dernières activités, de la plus ancienne à la plus récente",
    )


class SportCard(BaseModel):
    """Carte prête à afficher pour un sport"""

    model_config = ConfigDict(frozen=True)

    title: str
    total_distance: str
    total_elevation: str
    total_duration: str
    activity_count: int
    average_speed: str
    chart: List[Dict[str, Any]] = Field(default_factory=list)
    empty_message: Optional[str] = None


class ComparisonRow(BaseModel):
    """Ligne du graphique de comparaison entre sports"""

    model_config = ConfigDict(frozen=True)

    sport: str
    total_distance: float
    total_elevation: float


class DashboardView(BaseModel):
    """Données complètes du tableau de bord"""

    model_config = ConfigDict(frozen=True)

    cards: List[SportCard] = Field(default_factory=list)
    comparison: List[ComparisonRow] = Field(default_factory=list)
    activity_count: int = 0
    possibly_truncated: bool = False
    notice: Optional[str] = None
    empty_message: Optional[str] = None
