"""simulation — The synthetic trade world behind the dashboard.

Nothing here talks to a real backend: KPIs drift, events are generated
from templates, and corridors escalate and recover on timers.

Submodules
----------
scheduler       Timer, TimerScheduler — virtual-time priority queue
generators      Pure drift / event helpers (random source injected)
engine          SimulationEngine — start/stop, ticks, recoveries
"""
