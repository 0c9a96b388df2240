from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from pathlib import Path

import cv2

from facetrack.core.annotations.index import AnnotationIndex
from facetrack.core.annotations.parse import AnnotationFormatError, load_annotation_file
from facetrack.core.overlay.draw import BOX_COLOR, BOX_LINE_WIDTH, OverlayRenderer, OverlayStyle
from facetrack.core.overlay.surface import CanvasSurface
from facetrack.core.video_sources.player import VideoPlayer

logger = logging.getLogger(__name__)


def run(args):
    try:
        annotations = load_annotation_file(args.annotations)
        index = AnnotationIndex.from_payload(annotations)
    except (OSError, AnnotationFormatError) as e:
        raise SystemExit(f"Cannot read annotations {args.annotations}: {e}") from None
    logger.info(
        "Loaded %d track(s), %d box(es) from %s", index.track_count, index.box_count, args.annotations
    )
    try:
        style = OverlayStyle(line_width=args.line_width, color=args.color)
    except ValueError as e:
        raise SystemExit(f"Invalid overlay style: {e}") from None

    display_size = None
    if args.display_width and args.display_height:
        display_size = (args.display_width, args.display_height)
    try:
        player = VideoPlayer.open(args.input, display_size=display_size)
    except RuntimeError:
        raise SystemExit(f"Cannot open video {args.input}") from None

    surface = CanvasSurface()
    renderer = OverlayRenderer(index, surface, style)
    per_frame: list[dict] = []

    @player.on_time_update
    def _redraw(host: VideoPlayer) -> None:
        rects = renderer.on_playback_event(host)
        per_frame.append({"t": host.current_time, "boxes": [asdict(r) for r in rects]})

    out_path = Path(args.output)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    writer = None
    with player:
        player.play()
        while True:
            frame = player.step()
            if frame is None:
                break
            if writer is None:
                fps = player.source.fps or 25.0
                fourcc = cv2.VideoWriter_fourcc(*args.fourcc)
                writer = cv2.VideoWriter(
                    str(out_path), fourcc, fps, (frame.shape[1], frame.shape[0])
                )
            writer.write(surface.composite(frame))
            if args.max_frames and len(per_frame) >= args.max_frames:
                break
    if writer is not None:
        writer.release()

    if args.boxes_json:
        boxes_path = Path(args.boxes_json)
        boxes_path.parent.mkdir(parents=True, exist_ok=True)
        with open(boxes_path, "w", encoding="utf-8") as f:
            json.dump(per_frame, f, indent=2)
    drawn = sum(1 for item in per_frame if item["boxes"])
    print(f"Wrote {len(per_frame)} frames ({drawn} with face boxes) to {out_path}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Burn face-tracking boxes into a video")
    parser.add_argument("--input", required=True, help="Path to video file")
    parser.add_argument("--annotations", required=True, help="Face annotations JSON")
    parser.add_argument("--output", required=True, help="Where to write the rendered video")
    parser.add_argument("--boxes-json", default=None, help="Optional per-frame boxes JSON")
    parser.add_argument("--display-width", type=int, default=0, help="Rendered width (0 = source)")
    parser.add_argument("--display-height", type=int, default=0, help="Rendered height (0 = source)")
    parser.add_argument("--line-width", type=float, default=BOX_LINE_WIDTH)
    parser.add_argument("--color", default=BOX_COLOR, help="#rrggbb outline color")
    parser.add_argument("--fourcc", default="mp4v", help="FourCC of the output codec")
    parser.add_argument("--max-frames", type=int, default=0, help="Limit frames for quick tests")
    logging.basicConfig(level=logging.INFO)
    run(parser.parse_args())
