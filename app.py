from __future__ import annotations

import json
import math
import tempfile
from dataclasses import replace
from pathlib import Path

import numpy as np
import pandas as pd
import streamlit as st
import streamlit.components.v1 as components

from testgen3d.factory import create_default_registry
from testgen3d.fixtures import GROUND_KINDS, RIGID_KINDS
from testgen3d.io import write_ply
from testgen3d.packing import PackingInfeasibleError, assign_shape_kinds, ground_layout, rigid_layout
from testgen3d.rng import DEFAULT_SEED, random_stream
from testgen3d.sky import TURBIDITY_RANGE, sample_sky
from testgen3d.strands import PRESETS, generate_points, generate_strands

PLY_HEIGHT = 420
PAGES = ["Textures", "Sky", "Packing", "Strands"]
REGISTRY = create_default_registry()


def pl_component(ply_content_str: str, height: int = PLY_HEIGHT, reset_nonce: int = 0) -> None:
    import uuid

    container_id = f"pc_{reset_nonce}_{uuid.uuid4().hex}"
    ply_json = json.dumps(ply_content_str)
    html = f"""
    <div id="{container_id}" style="width:100%; height:{height}px; background:#fff;"></div>
    <script type="importmap">
      {{
        "imports": {{
          "three": "https://unpkg.com/three@0.161.0/build/three.module.js"
        }}
      }}
    </script>
    <script type="module">
      import * as THREE from "three";
      import {{ OrbitControls }} from "https://unpkg.com/three@0.161.0/examples/jsm/controls/OrbitControls.js";
      import {{ PLYLoader }} from "https://unpkg.com/three@0.161.0/examples/jsm/loaders/PLYLoader.js";

      const container = document.getElementById("{container_id}");
      const scene = new THREE.Scene();
      scene.background = new THREE.Color(0xffffff);
      const camera = new THREE.PerspectiveCamera(45, 1, 0.001, 1e9);
      camera.position.set(0, 0, 3);
      const renderer = new THREE.WebGLRenderer({{ antialias: true }});
      renderer.setPixelRatio(1);
      container.appendChild(renderer.domElement);
      const controls = new OrbitControls(camera, renderer.domElement);
      controls.enableDamping = true;

      const geometry = new PLYLoader().parse({ply_json});
      geometry.computeBoundingSphere();
      const sphere = geometry.boundingSphere;
      const material = new THREE.PointsMaterial({{ size: sphere.radius * 0.004, color: 0x333333 }});
      scene.add(new THREE.Points(geometry, material));
      controls.target.copy(sphere.center);
      camera.position.copy(sphere.center).add(new THREE.Vector3(0, 0, sphere.radius * 2.5));

      function resize() {{
        const width = container.clientWidth || 300;
        camera.aspect = width / {height};
        camera.updateProjectionMatrix();
        renderer.setSize(width, {height}, false);
      }}
      new ResizeObserver(resize).observe(container);
      resize();
      function animate() {{
        requestAnimationFrame(animate);
        controls.update();
        renderer.render(scene, camera);
      }}
      animate();
    </script>
    """
    components.html(html, height=height)


def init_state() -> None:
    defaults = {
        "page": PAGES[0],
        "seed": DEFAULT_SEED,
        "viewer_reset_nonce": 0,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def tone_map(hdr: np.ndarray, exposure: float) -> np.ndarray:
    """Reinhard plus sRGB-ish gamma, for display only."""
    rgb = np.maximum(hdr[..., :3] * exposure, 0.0)
    rgb = rgb / (1.0 + rgb)
    return (np.power(rgb, 1.0 / 2.2) * 255).astype(np.uint8)


@st.cache_data
def cached_texture(name: str, size: int) -> np.ndarray:
    return REGISTRY.get(name).synthesize(size)


def render_textures() -> None:
    st.title("Procedural textures")
    name = st.sidebar.selectbox("Texture", REGISTRY.names())
    size = st.sidebar.select_slider("Size", options=[64, 128, 256, 512, 1024], value=512)
    pixels = cached_texture(name, size)
    if REGISTRY.get(name).hdr:
        st.image(tone_map(pixels, 1.0), caption=f"{name} (tone mapped)")
    else:
        st.image(pixels, caption=name)
    st.caption(f"{pixels.shape[1]}x{pixels.shape[0]}, dtype {pixels.dtype}")


def render_sky() -> None:
    st.title("Sky radiance")
    elevation = st.sidebar.slider("Sun elevation (deg)", 0.0, 90.0, round(90.0 - math.degrees(0.8), 1))
    turbidity = st.sidebar.slider("Turbidity", TURBIDITY_RANGE[0], TURBIDITY_RANGE[1], 8.0)
    albedo = st.sidebar.slider("Ground albedo", 0.0, 1.0, 0.2)
    exposure = st.sidebar.slider("Exposure (stops)", -10.0, 4.0, -6.0)
    restrict = st.sidebar.checkbox("Upper hemisphere only", value=True)
    try:
        hdr = sample_sky(512, 256, math.radians(90.0 - elevation), turbidity, albedo, 1.0, restrict)
    except ValueError as exc:
        st.error(str(exc))
        return
    st.image(tone_map(hdr, 2.0**exposure), caption="latitude-longitude environment", use_container_width=True)
    luminance = hdr[..., :3].mean(axis=2)
    st.metric("Peak radiance", f"{float(luminance.max()):.3f}")


def render_packing() -> None:
    st.title("Sphere packing")
    preset = st.sidebar.radio("Layout", ["ground", "rigid"], horizontal=True)
    count = st.sidebar.number_input("Objects (floor included)", min_value=1, max_value=256, value=32, step=1)
    seed = st.sidebar.number_input("Seed", min_value=0, value=int(st.session_state.seed), step=1)
    rng = random_stream(int(seed))
    try:
        if preset == "ground":
            records = ground_layout(int(count), rng=rng)
            shapes = assign_shape_kinds(records, GROUND_KINDS, rng=rng)
        else:
            records = rigid_layout(int(count), rng=rng)
            shapes = assign_shape_kinds(records, RIGID_KINDS, rng=rng)
    except PackingInfeasibleError as exc:
        st.error(str(exc))
        return

    df = pd.DataFrame(
        [
            {
                "name": s.name,
                "kind": s.kind.value,
                "x": s.record.position[0],
                "y": s.record.position[1],
                "z": s.record.position[2],
                "radius": s.record.radius,
                "level": s.record.level,
            }
            for s in shapes
        ]
    )
    if df.empty:
        st.info("Only the floor was placed.")
        return
    st.dataframe(df, use_container_width=True)
    st.subheader("Top view")
    st.scatter_chart(df, x="x", y="z", size="radius")
    st.subheader("Discretization levels")
    st.bar_chart(df.groupby("level")["name"].count())


def render_strands() -> None:
    st.title("Strand bundles")
    preset = st.sidebar.selectbox("Preset", ["points", *PRESETS])
    count = st.sidebar.select_slider("Strands", options=[256, 1024, 4096, 16384], value=4096)
    if st.sidebar.button("Reset view"):
        st.session_state.viewer_reset_nonce += 1
        st.rerun()
    rng = random_stream(int(st.session_state.seed))
    if preset == "points":
        shape = generate_points(count, scale=(0.5, 0.5, 0.5), rng=rng)
    else:
        shape = generate_strands(replace(PRESETS[preset], count=count), rng=rng)
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "preview.ply"
        write_ply(path, shape)
        ply_text = path.read_text(encoding="utf-8")
    cols = st.columns(2)
    cols[0].metric("Vertices", shape.num_vertices)
    cols[1].metric("Mean radius", f"{float(shape.radius.mean()):.5f}")
    pl_component(ply_text, reset_nonce=st.session_state.viewer_reset_nonce)


def main() -> None:
    st.set_page_config(page_title="testgen3d preview", layout="wide")
    init_state()
    st.session_state.page = st.sidebar.radio("Generator", PAGES, index=PAGES.index(st.session_state.page))
    pages = {
        "Textures": render_textures,
        "Sky": render_sky,
        "Packing": render_packing,
        "Strands": render_strands,
    }
    pages[st.session_state.page]()


main()
