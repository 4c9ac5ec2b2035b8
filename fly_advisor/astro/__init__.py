"""
Astronomical calculations: moon phase, sunrise/sunset, solunar periods.

Modules
-------
lunar : get_moon_phase() + get_sunrise() / get_sunset() +
        get_solunar_periods() + is_in_solunar_period() +
        get_lunar_insights() — pure functions, no I/O.
"""
