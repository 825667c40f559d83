import os

import matplotlib.pyplot as plt
import numpy as np

from contactsim.config.settings import OUTPUT_DIR


def plot_contact_timeline(result, output_dir=OUTPUT_DIR):
    """
    Plot the primary contact timeline (0/1 per step) against elapsed hours.
    """
    os.makedirs(output_dir, exist_ok=True)

    flags = np.asarray(result.contact_flags, dtype=int)
    hours = np.arange(flags.size) * result.step_seconds / 3600.0

    plt.figure(figsize=(10, 3))
    plt.step(hours, flags, where="post", color="tab:green")
    plt.fill_between(hours, flags, step="post", alpha=0.3, color="tab:green")
    plt.ylim(-0.1, 1.1)
    plt.yticks([0, 1], ["outage", "contact"])
    plt.xlabel("Elapsed time (h)")
    plt.title(
        f"Beacon ↔ SAT-{result.primary_id}: "
        f"{result.stats.handshake_count} handshakes, {result.stats.outage_count} outages"
    )

    save_path = os.path.join(output_dir, "contact_timeline.png")
    plt.tight_layout()
    plt.savefig(save_path)
    plt.close()

    print(f"[OK] Saved: {save_path}")
    return save_path


def plot_constellation_contacts(result, output_dir=OUTPUT_DIR):
    """
    Raster of contact per constellation member (rows) over time (columns).
    Returns None when the run was not in constellation mode.
    """
    if not result.constellation_mode:
        return None
    os.makedirs(output_dir, exist_ok=True)

    ids = sorted(result.all_contact_flags.keys())
    grid = np.vstack([np.asarray(result.all_contact_flags[i], dtype=int) for i in ids])
    hours = grid.shape[1] * result.step_seconds / 3600.0

    plt.figure(figsize=(10, max(3, len(ids) * 0.12)))
    plt.imshow(grid, aspect="auto", interpolation="nearest", cmap="Greens",
               extent=(0.0, hours, len(ids) - 0.5, -0.5))
    plt.xlabel("Elapsed time (h)")
    plt.ylabel("Satellite")
    if len(ids) <= 20:
        plt.yticks(range(len(ids)), [str(i) for i in ids])
    else:
        plt.yticks(range(0, len(ids), 11), [str(ids[k]) for k in range(0, len(ids), 11)], fontsize=8)
    plt.title("Contact per constellation member")

    save_path = os.path.join(output_dir, "constellation_contacts.png")
    plt.tight_layout()
    plt.savefig(save_path)
    plt.close()

    print(f"[OK] Saved: {save_path}")
    return save_path
