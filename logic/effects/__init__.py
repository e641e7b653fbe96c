"""logic.effects — Short-lived visual entity families.

pool       TransientPool — shared spawn / animate / cleanup lifecycle
shockwave  ShockwavePool — rings at disruption epicentres
alerts     AlertPool     — predictive alerts with probabilistic resolution
reroute    ReroutePool   — alternative-path overlays on disrupted corridors
weather    WeatherPool   — drifting weather cells
"""

from logic.effects.pool import TransientPool
from logic.effects.shockwave import ShockwavePool
from logic.effects.alerts import AlertPool
from logic.effects.reroute import ReroutePool
from logic.effects.weather import WeatherPool

__all__ = ["TransientPool", "ShockwavePool", "AlertPool", "ReroutePool", "WeatherPool"]
