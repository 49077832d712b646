# compiler.py v1.1
"""
Project Tesseract - Video Compilation Module
--------------------------------------------
- Assembles rendered PNG frames into an MP4 with ffmpeg.
- Reports ffmpeg errors and a missing ffmpeg binary instead of crashing.
- Removes the frames afterwards unless asked to keep them, and keeps them
  whenever compilation failed.
"""
import os
import shutil
import subprocess

from termcolor import cprint

from styling import C

def compile_video(frames_dir, output_filename, framerate=60, keep_frames=False) -> bool:
    """Builds a video from frame_%05d.png files. Returns True on success."""
    cprint("\n--- COMPILING VIDEO ---", C.SUBHEADER, attrs=C.BOLD_ATTR)
    if not os.path.exists(frames_dir) or not os.listdir(frames_dir):
        cprint(f"Error: Frames directory '{frames_dir}' is empty or does not exist.", C.ERROR)
        return False

    ffmpeg_command = [
        'ffmpeg',
        '-framerate', str(framerate),
        '-i', os.path.join(frames_dir, 'frame_%05d.png'),
        '-c:v', 'libx264',
        '-pix_fmt', 'yuv420p',  # Widest player compatibility
        '-y',                   # Overwrite without asking
        output_filename
    ]

    success = False
    try:
        print(f"Running FFMPEG to create '{output_filename}'...")
        subprocess.run(ffmpeg_command, capture_output=True, text=True, check=True)
        cprint("Video compilation successful!", C.SUCCESS)
        success = True
    except subprocess.CalledProcessError as e:
        cprint("\n--- FFMPEG ERROR ---", C.ERROR)
        print(e.stderr)
        cprint("--------------------", C.ERROR)
    except FileNotFoundError:
        cprint("\nError: `ffmpeg` command not found.", C.ERROR)
        cprint("Please install ffmpeg and ensure it is in your system's PATH.", C.WARNING)

    if success and not keep_frames:
        print(f"Cleaning up frames directory '{frames_dir}'...")
        shutil.rmtree(frames_dir)
    return success
