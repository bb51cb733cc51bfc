import sys

from routeclient import GeoPoint, RouteRequest, RoutingWebClient, configure_logging, load_settings

# Andorra la Vella -> Escaldes-Engordany
DEFAULT_START = "42.509225,1.534728"
DEFAULT_END = "42.512602,1.551558"


def parse_point(text: str) -> GeoPoint:
    lat, lon = text.split(",")
    return GeoPoint(float(lat), float(lon))


def run_route(start: str = DEFAULT_START, end: str = DEFAULT_END, profile: str = "car"):
    settings = load_settings()
    configure_logging(settings.log_level)
    client = RoutingWebClient.from_settings(settings)

    request = RouteRequest.between(parse_point(start), parse_point(end), profile=profile)
    response = client.route(request)

    if response.has_errors():
        for error in response.errors:
            print(f"[ERROR] {type(error).__name__}: {error}")
        return 1

    best = response.get_best()
    print(f"Distance: {best.distance / 1000:.2f} km")
    print(f"Time: {best.time / 60000:.1f} min")
    for instruction in best.instructions:
        print(f"  {instruction.text} ({instruction.distance:.0f} m)")
    if response.has_alternatives():
        print(f"{len(response.paths) - 1} alternative(s) available.")
    return 0


if __name__ == "__main__":
    sys.exit(run_route(*sys.argv[1:4]))
