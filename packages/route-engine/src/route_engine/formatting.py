def format_distance(distance_km: float) -> str:
    if distance_km < 1:
        return f"{round(distance_km * 1000)} m"
    return f"{distance_km:.1f} km"


def format_duration(minutes: float) -> str:
    if minutes < 60:
        return f"{round(minutes)} min"
    hours = int(minutes // 60)
    remaining = round(minutes % 60)
    if remaining == 60:
        hours += 1
        remaining = 0
    if remaining == 0:
        return f"{hours}h"
    return f"{hours}h {remaining}min"
