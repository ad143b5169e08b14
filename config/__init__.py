from .mqtt_config import MqttConfig
from .database_config import DatabaseConfig
from .app_config import AppConfig
from .simulation_config import SimulationSettings

__all__ = ['MqttConfig', 'DatabaseConfig', 'AppConfig', 'SimulationSettings']
