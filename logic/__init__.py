"""logic — Presentation-side systems driven by the Store.

Subpackages
-----------
effects/     — transient effect pool + shockwave, alert, reroute and
               weather families

Top-level modules
-----------------
autopilot    — scripted camera/state choreography (Choreography, AutopilotDirector)
easing       — tween curves used by the choreography
selection    — selected/hovered port and executive summary mode
performance  — FPS sampling and the reduced-effects latch
idle         — user-inactivity timer
sound        — synthesized cue playback and the mute preference
formatters   — KPI, clock and countdown display strings
"""
