# main.py v1.2
# Part of Project Tesseract: 4D Projection Lab
# v1.2: "Headless Runs"
# - Drives one simulation through a SimulationHost with a fixed-step frame
#   clock, so a run is reproducible frame for frame.
# - `--set key=value` injects parameters exactly as a UI slider would
#   (flat or dotted keys, e.g. rotationSpeeds.xw=0.8).
# - `--render` draws every frame to PNG, `--video` compiles them with ffmpeg.
# - The host is always shut down, and the render target is audited for
#   leaked handles at the end of the run; a leak exits with status 2.
# - A simulation that fails to load is reported and exits with status 1.

import argparse
import json
import os
import shutil
import sys
import time

import numpy as np
from tqdm import tqdm

from styling import C, cprint
from compiler import compile_video
from render_target import InMemoryRenderTarget
from renderer import render_frame
from simulation_host import SIMULATION_REGISTRY, FrameClock, SimulationHost

def parse_param(text: str):
    """'key=value' -> (key, value); value is a bool for true/false, else a float."""
    if '=' not in text:
        raise argparse.ArgumentTypeError(f"Expected KEY=VALUE, got '{text}'")
    key, raw = text.split('=', 1)
    lowered = raw.strip().lower()
    if lowered in ('true', 'false'):
        return key.strip(), lowered == 'true'
    try:
        return key.strip(), float(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Value for '{key}' must be a number or true/false, got '{raw}'")

def list_simulations():
    cprint("\n--- Available simulations ---", C.HEADER, attrs=C.BOLD_ATTR)
    target = InMemoryRenderTarget()
    for key, simulation_class in SIMULATION_REGISTRY.items():
        simulation = simulation_class(target)
        cprint(f"{key:12s} {simulation.info['title']}", C.SUBHEADER)
        for control in simulation.get_ui_controls():
            bounds = f"[{control.min}, {control.max}]" if control.type == 'slider' else "(checkbox)"
            print(f"    {control.id:24s} default={control.default} {bounds}")

def main():
    """Main function to run a 4D simulation headlessly."""
    parser = argparse.ArgumentParser(description="Run a Project Tesseract 4D simulation.")

    parser.add_argument('--sim', type=str, default='hypercube', choices=list(SIMULATION_REGISTRY), help="Simulation to run.")
    parser.add_argument('-f', '--frames', type=int, default=600, help="Number of frames to simulate.")
    parser.add_argument('--fps', type=float, default=60.0, help="Frames per second of the fixed-step clock.")
    parser.add_argument('-W', '--width', type=int, default=1280, help="Viewport width.")
    parser.add_argument('-H', '--height', type=int, default=720, help="Viewport height.")
    parser.add_argument('-s', '--seed', type=int, default=None, help="Seed for reproducible point clouds.")
    parser.add_argument('--set', dest='params', type=parse_param, action='append', default=[],
                        metavar='KEY=VALUE', help="Override a parameter, e.g. rotationSpeeds.xw=0.8 (repeatable).")
    parser.add_argument('--render', action='store_true', help="Render every frame to PNG.")
    parser.add_argument('--video', action='store_true', help="Compile rendered frames into an MP4 (implies --render).")
    parser.add_argument('--keep-frames', action='store_true', help="Keep PNG frames after compiling the video.")
    parser.add_argument('--out-dir', type=str, default='.', help="Where run directories are created.")
    parser.add_argument('--list', action='store_true', help="List simulations and their parameters, then exit.")

    args = parser.parse_args()

    if args.list:
        list_simulations()
        return 0

    render = args.render or args.video
    SEED = args.seed if args.seed is not None else int(np.random.randint(0, 1_000_000))
    run_name = f"{args.sim}_{args.frames}f_{args.fps:g}fps_SEED_{SEED}"
    RUN_DIR = os.path.join(args.out_dir, f"run_{run_name}")
    FRAMES_DIR = os.path.join(RUN_DIR, 'frames')

    cprint(f"\n--- PROJECT TESSERACT: 4D PROJECTION LAB ---", C.HEADER, attrs=C.BOLD_ATTR)
    cprint(f"Starting run: {run_name}", C.INFO)

    if render:
        if os.path.exists(RUN_DIR):
            cprint(f"Warning: Run directory '{RUN_DIR}' already exists. Overwriting.", C.WARNING)
            shutil.rmtree(RUN_DIR)
        os.makedirs(FRAMES_DIR)

    renderer_size = {'width': args.width, 'height': args.height}
    render_target = InMemoryRenderTarget()
    host = SimulationHost(
        render_target,
        renderer_size=renderer_size,
        options={'hypersphere': {'rng': np.random.default_rng(SEED)}},
    )

    try:
        host.select(args.sim)
    except Exception as e:
        # The host has already cleaned up; report and stop without a traceback.
        cprint(f"Simulation failed to load: {type(e).__name__} - {e}", C.ERROR)
        return 1

    for key, value in args.params:
        host.set_param(key, value)
        cprint(f"   -> Parameter override: {key} = {value}", C.DEBUG)

    clock = FrameClock(fixed_delta=1.0 / args.fps)
    start_time = time.time()
    final_frame_count = 0

    try:
        for frame in tqdm(range(args.frames), desc=f"Simulating ({args.sim})", bar_format="{l_bar}{bar:30}{r_bar}"):
            delta_time, elapsed_time = clock.tick()
            host.tick(delta_time, elapsed_time)
            if render:
                title = f"{host.active.info['title']} | Frame: {frame + 1} | t = {elapsed_time:.2f}s"
                render_frame(render_target, os.path.join(FRAMES_DIR, f"frame_{frame + 1:05d}.png"), title)
            final_frame_count = frame + 1
    except KeyboardInterrupt:
        cprint("\nSimulation interrupted by user.", C.WARNING)
    finally:
        final_angles = dict(host.active.angles) if host.active is not None else {}
        host.shutdown()

    cprint(f"\nSimulation finished at frame {final_frame_count}.", C.SUCCESS)
    print(f"Total simulation time: {time.time() - start_time:.2f} seconds.")
    print("Final angles: " + ", ".join(f"{plane}={angle:.3f}" for plane, angle in final_angles.items()))

    leaked = render_target.live_count
    if leaked:
        cprint(f"Warning: {leaked} render handles were never released!", C.ERROR)
    else:
        cprint(f"Render handles: {render_target.acquired_count} acquired, {render_target.released_count} released.", C.SUCCESS)

    if render:
        metadata = {
            'run_name': run_name, 'simulation': args.sim, 'seed': SEED, 'fps': args.fps,
            'max_frames': args.frames, 'final_frame_count': final_frame_count,
            'renderer_size': renderer_size, 'params': dict(args.params), 'final_angles': final_angles,
            'leaked_handles': leaked,
        }
        with open(os.path.join(RUN_DIR, "metadata.json"), 'w') as f:
            json.dump(metadata, f, indent=4)

        if args.video:
            compile_video(FRAMES_DIR, os.path.join(RUN_DIR, f"{run_name}.mp4"),
                          framerate=args.fps, keep_frames=args.keep_frames)
        cprint(f"\nRun '{run_name}' complete. Output saved in '{RUN_DIR}'.", C.HEADER, attrs=C.BOLD_ATTR)

    return 2 if leaked else 0

if __name__ == "__main__":
    sys.exit(main())
