# contactsim/cli.py
import math

from contactsim.config import settings
from contactsim.data.tle_feed import load_constellation
from contactsim.engine.constellation import ConstellationLayout
from contactsim.models.params import (
    BEACON_MODES,
    BeaconConfig,
    Horizon,
    RemoteConfig,
    SimulationParams,
)


def get_float(prompt, default=None):
    """
    Safe float input with optional default. Non-interactive (EOF) returns default.
    """
    while True:
        try:
            user = input(prompt)
        except EOFError:
            return float(default) if default is not None else None
        if user.strip() == "" and default is not None:
            return float(default)
        try:
            val = float(user)
        except (ValueError, TypeError):
            print("❌ Please enter a valid number.")
            continue
        if not math.isfinite(val):
            print("❌ Please enter a finite number.")
            continue
        return val


def get_optional_float(prompt):
    """Float input where an empty answer (or EOF) means 'not supplied'."""
    while True:
        try:
            user = input(prompt)
        except EOFError:
            return None
        if user.strip() == "":
            return None
        try:
            return float(user)
        except (ValueError, TypeError):
            print("❌ Please enter a valid number (or press Enter to skip).")


def get_int(prompt, default=None, min_val=None, max_val=None):
    """
    Safe integer input with limits. Non-interactive (EOF) returns default.
    """
    while True:
        try:
            user = input(prompt)
        except EOFError:
            return int(default) if default is not None else None
        if user.strip() == "" and default is not None:
            return int(default)
        try:
            val = int(user)
            if min_val is not None and val < min_val:
                raise ValueError
            if max_val is not None and val > max_val:
                raise ValueError
            return val
        except (ValueError, TypeError):
            print("❌ Invalid integer input.")


def get_yes_no(prompt, default=False):
    try:
        answer = input(prompt).strip().lower()
    except EOFError:
        return default
    if answer == "":
        return default
    return answer.startswith("y")


def choose_beacon_mode():
    """
    Choose the Beacon orbit mode.
      1 -> sun-synchronous (inclination derived from altitude) [default]
      2 -> non-polar (inclination 30-98 deg)
      3 -> custom
    """
    print("\n⚙️  Beacon Orbit Mode")
    print("  1) Sun-synchronous (Recommended)")
    print("  2) Non-polar (inclination between 30° and 98°)")
    print("  3) Custom")

    try:
        choice = input("Select mode [1]: ").strip()
    except EOFError:
        choice = ""

    if choice == "2":
        return BEACON_MODES[1]
    if choice == "3":
        return BEACON_MODES[2]
    return BEACON_MODES[0]


def create_beacon_config():
    mode = choose_beacon_mode()

    print("\n🛰️ Beacon Configuration")
    altitude = get_float(
        f"Altitude (km) [default {settings.DEFAULT_BEACON_ALTITUDE_KM}]: ",
        default=settings.DEFAULT_BEACON_ALTITUDE_KM,
    )

    inclination = settings.DEFAULT_BEACON_INCLINATION_DEG
    lst = None
    if mode != "sun-synchronous":
        inclination = get_float(
            f"Inclination (deg) [default {settings.DEFAULT_BEACON_INCLINATION_DEG}]: ",
            default=settings.DEFAULT_BEACON_INCLINATION_DEG,
        )
    if mode == "sun-synchronous":
        lst = get_float(
            f"Local solar time of ascending node (h) [default {settings.DEFAULT_LOCAL_SOLAR_TIME_H}]: ",
            default=settings.DEFAULT_LOCAL_SOLAR_TIME_H,
        )
    elif mode == "custom":
        lst = get_optional_float("Local solar time (h) [Enter to skip, RAAN = 0]: ")

    half_angle = get_float(
        f"Antenna half-angle (deg) [default {settings.BEACON_HALF_ANGLE_DEG}]: ",
        default=settings.BEACON_HALF_ANGLE_DEG,
    )

    return BeaconConfig(
        mode=mode,
        altitude_km=altitude,
        inclination_deg=inclination,
        local_solar_time_hours=lst,
        antenna_half_angle_deg=half_angle,
    )


def create_remote_config():
    """
    Returns (RemoteConfig, ConstellationLayout or None).
    Constellation mode pulls members from the orbital-element feed.
    """
    print("\n📡 Remote Satellite Configuration")

    show_all = get_yes_no("Simulate the full constellation? (y/N): ", default=False)

    members = []
    layout = None
    if show_all:
        members, source = load_constellation()
        print(f"✔ Loaded {len(members)} constellation members ({source})")
        if source == "fallback":
            layout = ConstellationLayout.iridium()

    satellite_id = get_int(
        f"Primary satellite id [default {settings.DEFAULT_REMOTE_ID}]: ",
        default=settings.DEFAULT_REMOTE_ID,
        min_val=0,
    )
    altitude = settings.DEFAULT_REMOTE_ALTITUDE_KM
    inclination = settings.DEFAULT_REMOTE_INCLINATION_DEG
    if not show_all:
        altitude = get_float(
            f"Altitude (km) [default {settings.DEFAULT_REMOTE_ALTITUDE_KM}]: ",
            default=settings.DEFAULT_REMOTE_ALTITUDE_KM,
        )
        inclination = get_float(
            f"Inclination (deg) [default {settings.DEFAULT_REMOTE_INCLINATION_DEG}]: ",
            default=settings.DEFAULT_REMOTE_INCLINATION_DEG,
        )
    half_angle = get_float(
        f"Antenna half-angle (deg) [default {settings.REMOTE_HALF_ANGLE_DEG}]: ",
        default=settings.REMOTE_HALF_ANGLE_DEG,
    )

    config = RemoteConfig(
        satellite_id=satellite_id,
        altitude_km=altitude,
        inclination_deg=inclination,
        antenna_half_angle_deg=half_angle,
        show_all=show_all,
        members=members,
    )
    return config, layout


def ask_horizon():
    print("\n⏱️  Horizon")
    duration = get_float(
        f"Duration (s) [default {int(settings.DURATION_SECONDS)}]: ",
        default=settings.DURATION_SECONDS,
    )
    step = get_float(
        f"Step (s) [default {int(settings.STEP_SECONDS)}]: ",
        default=settings.STEP_SECONDS,
    )
    return Horizon(duration_seconds=duration, step_seconds=step)


def run_cli():
    print("======================================")
    print("   BEACON CONTACT SIMULATOR (CLI)     ")
    print("======================================")

    beacon = create_beacon_config()
    remote, layout = create_remote_config()
    horizon = ask_horizon()

    params = SimulationParams(beacon=beacon, remote=remote, horizon=horizon)

    print("\n✅ CLI input complete.")
    print(f"→ Beacon mode: {beacon.mode}")
    print(f"→ Remotes: {len(remote.members) if remote.show_all else 1}")
    print(f"→ Horizon: {horizon.duration_seconds:g} s in steps of {horizon.step_seconds:g} s")

    return params, layout
