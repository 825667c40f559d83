# contactsim/main.py
import json
import logging
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from contactsim.cli import run_cli
from contactsim.config import settings
from contactsim.errors import ConfigurationError
from contactsim.simulation.worker import SimulationWorker
from contactsim.visualization.plots import plot_constellation_contacts, plot_contact_timeline

# --- Setup logger ------------------------------------------------------------
log = logging.getLogger("contactsim.main")


def save_json(obj: Any, name_prefix: str) -> str:
    ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    out_dir = Path(settings.OUTPUT_DIR)
    out_dir.mkdir(parents=True, exist_ok=True)
    filename = out_dir / f"{name_prefix}_{ts}.json"
    with open(filename, "w") as f:
        json.dump(obj, f, indent=2, default=lambda o: repr(o))
    return str(filename)


def print_summary(result) -> None:
    s = result.stats
    secs = s.in_seconds(result.step_seconds)
    sp = result.initial_subpoints

    print("\n================ CONTACT SUMMARY ================\n")
    print(f"Primary satellite  : {result.primary_id}")
    print(f"Handshakes         : {s.handshake_count}")
    print(f"Total contact (min): {secs['total_contact_s'] / 60.0:.1f}")
    print(f"Outages            : {s.outage_count}")
    print(f"Total outage (min) : {secs['total_outage_s'] / 60.0:.1f}")
    print(f"Avg outage (min)   : {secs['avg_outage_s'] / 60.0:.1f}")
    print(f"Beacon subpoint    : {sp['beacon']['latitude']:.2f}, {sp['beacon']['longitude']:.2f}")
    print(f"Remote subpoint    : {sp['remote']['latitude']:.2f}, {sp['remote']['longitude']:.2f}")
    if result.constellation_mode:
        print(f"Any member linked  : {result.combined_stats.handshake_count} handshakes")
    print("-" * 50)


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s  %(levelname)-7s  %(message)s",
        datefmt="%H:%M:%S",
    )
    try:
        params, layout = run_cli()
        log.info("Starting simulation: beacon mode=%s", params.beacon.mode)

        worker = SimulationWorker()
        worker.start(params, layout=layout)
        result = worker.wait(on_progress=lambda pct: print(f"  … {pct}%"))

        print_summary(result)

        out_file = save_json(
            {
                "meta": {
                    "duration_s": params.horizon.duration_seconds,
                    "step_s": params.horizon.step_seconds,
                    "timestamp_utc": datetime.now(timezone.utc).isoformat(),
                },
                "result": result.to_dict(),
            },
            "contact_results",
        )
        log.info("Saved contact results: %s", out_file)

        try:
            plot_contact_timeline(result)
            plot_constellation_contacts(result)
            log.info("Plots generated.")
        except Exception as e:
            log.warning("Plotting failed: %s", e)

    except ConfigurationError as e:
        log.error("Invalid configuration: %s", e)
    except RuntimeError as e:
        # worker errors arrive as RuntimeError carrying the child's message
        log.error("Simulation failed: %s", e)
    except Exception:
        log.error("Fatal exception during run:")
        traceback.print_exc()


if __name__ == "__main__":
    main()
