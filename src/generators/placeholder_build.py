"""
Placeholder WebGL build written when Unity is unavailable or fails.

The output mimics the layout of a real Unity WebGL export (index.html plus
Build/webgl.*) so the preview URL always resolves to a page describing the
game, with a simulated loader and the controls for its category.
"""

import html
from pathlib import Path
from typing import Dict, List

import structlog

from src.core.errors import FallbackSynthesisFailed
from src.models.project_model import GameCategory
from src.storage.file_utils import FileUtils, get_file_utils

logger = structlog.get_logger(__name__)

LOADER_JS = """function createUnityInstance(canvas, config, onProgress) {
  return new Promise(function (resolve) {
    var progress = 0;
    var interval = setInterval(function () {
      progress = Math.min(1, progress + 0.1);
      onProgress({ progress: progress });
      if (progress >= 1) {
        clearInterval(interval);
        resolve({
          SetFullscreen: function () { console.log("SetFullscreen called"); },
          SendMessage: function (obj, method, param) { console.log("SendMessage called:", obj, method, param); }
        });
      }
    }, 500);
  });
}
"""

FRAMEWORK_JS = 'console.log("Unity WebGL Framework Mock");\n'

CONTROLS: Dict[GameCategory, List[str]] = {
    GameCategory.FPS: [
        "W/A/S/D or Arrow Keys: Move", "Mouse: Look around", "Left Click: Shoot",
        "Space: Jump", "F: Interact", "ESC: Pause",
    ],
    GameCategory.ADVENTURE: [
        "W/A/S/D or Arrow Keys: Move", "Mouse: Camera control", "E: Interact",
        "I: Inventory", "Space: Jump", "ESC: Pause",
    ],
    GameCategory.PUZZLE: [
        "Mouse: Select and drag objects", "E: Interact", "R: Reset puzzle", "ESC: Pause",
    ],
    GameCategory.RACING: [
        "W/Up: Accelerate", "S/Down: Brake/Reverse", "A/D or Left/Right: Steer",
        "Space: Handbrake", "ESC: Pause",
    ],
    GameCategory.PLATFORMER: [
        "A/D or Left/Right: Move", "Space: Jump", "W/Up: Climb", "S/Down: Crouch",
        "Left Click: Attack", "E: Interact", "ESC: Pause",
    ],
}

DEFAULT_CONTROLS = ["W/A/S/D or Arrow Keys: Move", "Space: Jump/Action", "E: Interact", "ESC: Pause"]

INDEX_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>{title} - Unity WebGL Player</title>
  <script src="Build/webgl.loader.js"></script>
  <style>
    body {{ margin: 0; padding: 0; background-color: #231F20; }}
    #unity-container {{ width: 100%; height: 100vh; position: relative; }}
    #unity-canvas {{ width: 100%; height: 100%; background: #231F20; }}
    #unity-loading-bar {{ position: absolute; left: 50%; top: 50%; transform: translate(-50%, -50%); width: 80%; height: 20px; background: rgba(0,0,0,0.5); border-radius: 10px; }}
    #unity-progress-bar {{ width: 0%; height: 100%; background: #38761d; border-radius: 10px; }}
    #unity-fullscreen-button {{ position: absolute; right: 10px; bottom: 10px; padding: 8px 12px; background: rgba(0,0,0,0.5); color: white; border: none; border-radius: 5px; }}
    #unity-info {{ position: absolute; left: 10px; top: 10px; padding: 10px; background: rgba(0,0,0,0.5); color: white; border-radius: 5px; font-family: Arial; max-width: 400px; }}
    .hidden {{ display: none; }}
  </style>
</head>
<body>
  <div id="unity-container">
    <canvas id="unity-canvas"></canvas>
    <div id="unity-loading-bar"><div id="unity-progress-bar"></div></div>
    <div id="unity-info" class="hidden">
      <h2>{title}</h2>
      <p>{description}</p>
      <p>Game Type: {category}</p>
      <div id="game-controls">
        <h3>Controls:</h3>
        <ul>
{controls}
        </ul>
      </div>
    </div>
    <button id="unity-fullscreen-button" disabled>Fullscreen</button>
  </div>
  <script>
    var loadingBar = document.querySelector("#unity-loading-bar");
    var progressBar = document.querySelector("#unity-progress-bar");
    var infoPanel = document.querySelector("#unity-info");
    var fullscreenButton = document.querySelector("#unity-fullscreen-button");
    var config = {{
      dataUrl: "Build/webgl.data",
      frameworkUrl: "Build/webgl.framework.js",
      codeUrl: "Build/webgl.wasm",
      productName: {product_name},
      productVersion: "1.0"
    }};
    createUnityInstance(document.querySelector("#unity-canvas"), config, function (progress) {{
      progressBar.style.width = (100 * progress.progress) + "%";
      if (progress.progress >= 1) {{
        loadingBar.classList.add("hidden");
        infoPanel.classList.remove("hidden");
        fullscreenButton.disabled = false;
      }}
    }}).then(function (unityInstance) {{
      fullscreenButton.onclick = function () {{ unityInstance.SetFullscreen(1); }};
    }});
  </script>
</body>
</html>
"""


def render_index(name: str, description: str, category: GameCategory) -> str:
    """Render the placeholder player page."""
    category = GameCategory.coerce(category)
    controls = CONTROLS.get(category, DEFAULT_CONTROLS)
    # Embedded in an inline <script> as a string literal
    product_name = '"' + (
        name.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("<", "\\u003c")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    ) + '"'
    return INDEX_TEMPLATE.format(
        title=html.escape(name),
        description=html.escape(description),
        category=html.escape(category.value),
        controls="\n".join(f"          <li>{html.escape(item)}</li>" for item in controls),
        product_name=product_name,
    )


class PlaceholderBuildWriter:
    """Writes placeholder WebGL artifacts into a build's output directory."""

    def __init__(self, file_utils: FileUtils | None = None):
        self.file_utils = file_utils or get_file_utils()

    async def write(self, webgl_dir: Path, name: str, description: str, category: GameCategory) -> Path:
        """
        Write index.html and the Build/ stub files.

        Args:
            webgl_dir: Output directory, created if missing
            name: Game name shown on the page
            description: Game description shown on the page
            category: Game category selecting the controls list

        Returns:
            Path of the written index.html

        Raises:
            FallbackSynthesisFailed: If any file cannot be written
        """
        webgl_dir = Path(webgl_dir)
        build_dir = webgl_dir / "Build"
        try:
            await self.file_utils.write_text(build_dir / "webgl.loader.js", LOADER_JS)
            await self.file_utils.write_text(build_dir / "webgl.data", "MOCK_UNITY_DATA")
            await self.file_utils.write_text(build_dir / "webgl.framework.js", FRAMEWORK_JS)
            await self.file_utils.write_text(build_dir / "webgl.wasm", "MOCK_WASM_BINARY")
            index_file = await self.file_utils.write_text(
                webgl_dir / "index.html",
                render_index(name or "AI Generated Game", description or "An AI-generated game", category),
            )
        except OSError as e:
            raise FallbackSynthesisFailed(
                f"Failed to write placeholder build: {e}",
                details={"webgl_dir": str(webgl_dir)},
                original_exception=e,
            )

        logger.info("Wrote placeholder WebGL build", webgl_dir=str(webgl_dir))
        return index_file
