#!/usr/bin/env python3
"""
Roomba Cleaning Simulation
==========================

A Pygame simulation of a disc-shaped cleaning robot sweeping dirt off a
rectangular floor.

Features:
- Seek/orbit movement with friction and edge clamping
- Dirt-seeking AI with cluster scoring, target locks and stuck nudges
- Money, bin and battery economy with five upgrade tracks
- Epoch-versioned autosave (JSON files)
- Background running when the window is unfocused

Controls:
- SPACE: Start/stop cleaning
- C / E: Charge battery / empty bin
- P / R / N: Repaint dirt / reset / new game
- 1-5: Buy capacity, suction, speed, battery, auto AI
- B / S: Toggle background running / autosave
- H / F / O / A: Heat map / nav frame / overhang / auto camera
- Left click: Set a manual target
- ESC: Quit

Usage:
    python main.py [--save-dir DIR] [--dirt N] [--seed S] [--log-level LEVEL]

"""
import argparse
import logging
import random
import sys

# Ensure we can import from the package
import os
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import DIRT_COUNT, SAVE_DIR
from simulation import Simulation
from systems.persistence import JsonFileSnapshotStore


def main():
    parser = argparse.ArgumentParser(
        description="Roomba Cleaning Simulation"
    )
    parser.add_argument(
        '--save-dir',
        default=SAVE_DIR,
        help=f'Directory for save files (default: {SAVE_DIR})'
    )
    parser.add_argument(
        '--dirt', '-d',
        type=int,
        default=DIRT_COUNT,
        help=f'Particles per field (default: {DIRT_COUNT})'
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed for reproducible fields'
    )
    parser.add_argument(
        '--log-level',
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: INFO)'
    )
    parser.add_argument(
        '--telemetry-log',
        default=None,
        help='Write the telemetry event log here on exit'
    )

    args = parser.parse_args()

    if args.dirt < 0:
        parser.error("--dirt must be non-negative")

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    print("=" * 50)
    print("Roomba Cleaning Simulation")
    print("=" * 50)
    print(f"Save dir: {args.save_dir}")
    print(f"Dirt:     {args.dirt} particles")
    if args.seed is not None:
        print(f"Seed:     {args.seed}")
    print()
    print("Controls:")
    print("  SPACE - Start/stop cleaning")
    print("  C / E - Charge / empty bin")
    print("  P R N - Repaint / reset / new game")
    print("  1-5   - Buy upgrades")
    print("  Click - Set target")
    print("  ESC   - Quit")
    print("=" * 50)
    print()

    # Imported late so the headless parts never need a display
    from ui.app import App

    sim = Simulation(
        store=JsonFileSnapshotStore(args.save_dir),
        rng=random.Random(args.seed),
        dirt_count=args.dirt,
    )
    App(sim, telemetry_log=args.telemetry_log).run()

    print("Simulation ended.")


if __name__ == "__main__":
    main()
