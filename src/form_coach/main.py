import argparse
import os
import sys
import traceback

import cv2

from .exercise_analysis.base_analyzer import ExerciseVariant
from .trainer import FormCoachTrainer

EXERCISE_CHOICES = [variant.value for variant in ExerciseVariant]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Form Coach - squat and plank form analysis")
    parser.add_argument('--mode', type=str, choices=['camera', 'video'], default='camera',
                        help='Run mode: camera (default) or video')
    parser.add_argument('--exercise', type=str, default='squat_front', choices=EXERCISE_CHOICES,
                        help='Exercise to analyze for the whole session (default: squat_front)')
    parser.add_argument('--camera', type=int, default=0, help='Camera device ID')
    parser.add_argument('--video', type=str, help='Path to the video file to analyze (required if mode=video)')
    parser.add_argument('--no-voice', action='store_true', help='Disable spoken form cues')
    parser.add_argument('--inference-rate', type=int, default=3,
                        help='Run pose detection on one camera frame out of N (default: 3)')
    return parser


def main(argv=None) -> int:
    """Main entry point for Form Coach."""
    args = build_parser().parse_args(argv)

    if args.mode == 'video':
        if not args.video:
            print("Error: --video argument is required when mode is 'video'.")
            return 1
        if not os.path.isfile(args.video):
            print(f"Video file not found: {args.video}")
            return 1

    try:
        print("Initializing Form Coach...")
        trainer = FormCoachTrainer(exercise_type=args.exercise, voice=not args.no_voice,
                                   inference_rate=args.inference_rate)
        if args.mode == 'video':
            trainer.run(cv2.VideoCapture(args.video))
            print(f"Video analysis complete. Processed {trainer.num_frames} frames.")
        else:
            trainer.start(camera_id=args.camera)
    except Exception as e:
        print(f"Error starting trainer: {e}")
        traceback.print_exc()
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
