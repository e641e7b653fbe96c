"""scenes — Full-window views.

dashboard_scene   DashboardScene — input, per-frame update, composition
dashboard_draw    Equirectangular map projection and the draw helpers
"""
