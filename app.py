import streamlit as st
import streamlit.components.v1 as components
import json
import re

import pipe_render
from pipe_config import JOINT_STYLES, ConfigError, make_session_config
from pipe_layer import PipeLayer

st.set_page_config(page_title="Lattice Pipes Preview", layout="wide")
st.title("Lattice Pipes Preview")

with st.sidebar:
    st.header("Grid Settings")
    size_x = st.slider("Size X", 1, 30, 12)
    size_y = st.slider("Size Y", 1, 30, 12)
    size_z = st.slider("Size Z", 1, 30, 12)

    st.header("Growth Settings")
    pipes_per_session = st.slider("Pipes", 1, 60, 12)
    iterations = st.slider("Growth Iterations", 1, 40, (5, 10),
                           help="Range the per-pipe growth budget is drawn from")
    joint_style = st.selectbox("Joint Style", JOINT_STYLES, index=0)

    with st.expander("Straight Weight"):
        rare_chance = st.slider("Rare Chance (1 in N)", 1, 100, 20,
                                help="One pipe in N strongly prefers going straight")
        max_weight = st.slider("Max Weight", 1, 100, 20)
        common_max = st.slider("Common Max", 1, 20, 4)

    seed = st.number_input("Seed", min_value=0, value=0, step=1)

    st.header("View Settings")
    cell_size = st.slider("Cell Size", 10, 80, 40, 5)
    pipe_radius = st.slider("Pipe Radius", 0.1, 0.45, 0.3, 0.01)
    stroke_width = st.slider("Stroke Width", 0.2, 2.0, 0.8, 0.1)
    show_bounds = st.checkbox("Show Grid Bounds", value=True)
    zoom_level = st.slider("Zoom", 25, 200, 100, 5, help="Zoom level (100% = fit to window)")

    if st.button("Regenerate Layout", type="primary"):
        st.session_state.pop('layer', None)
        st.session_state.pop('layer_key', None)

try:
    config = make_session_config(
        grid_size=(size_x, size_y, size_z),
        pipes_per_session=pipes_per_session,
        growth_iterations=tuple(iterations),
        joint_style=joint_style,
        straight_weight={'rare_chance': rare_chance, 'max_weight': max_weight,
                         'common_max': common_max},
        seed=int(seed),
    )
except ConfigError as e:
    st.error(str(e))
    st.stop()

# Generate layer if needed
current_key = json.dumps(config, sort_keys=True, default=list)

if 'layer' not in st.session_state or st.session_state.get('layer_key') != current_key:
    layer = PipeLayer(config)
    gen_progress = st.progress(0, text="Growing pipes...")
    while not layer.is_complete:
        layer.tick()
        gen_progress.progress(min(len(layer) / max(pipes_per_session, 1), 1.0),
                              text="Pipe {} / {}".format(len(layer), pipes_per_session))
    gen_progress.empty()
    st.session_state.layer = layer
    st.session_state.layer_key = current_key

layer = st.session_state.layer
stats = layer.stats()
st.caption("{} pipes, {} / {} cells occupied, {}".format(
    stats['pipes'], stats['occupied'], stats['cells'],
    ", ".join("{} {}".format(n, s) for s, n in sorted(stats['by_status'].items()))))

progress_bar = st.progress(0, text="Rendering cells...")


def update_progress(current, total):
    progress_bar.progress(current / total, text="Rendering cell {} / {}".format(current, total))


svg_string = pipe_render.render_layer_svg(
    layer, cell_size=cell_size, pipe_radius=pipe_radius,
    stroke_width=stroke_width, show_bounds=show_bounds,
    progress_callback=update_progress,
)
progress_bar.empty()
# Make SVG responsive for display
display_svg = re.sub(r'width="[\d.]+"', 'width="100%"', svg_string, count=1)
display_svg = re.sub(r'height="[\d.]+"', 'height="100%"', display_svg, count=1)

svg_size = zoom_level

html_content = f'''
<div style="background:#f0f0f0; height:100%; display:flex; align-items:center;
            justify-content:center; overflow:auto; padding:20px; box-sizing:border-box;">
    <div style="background:white; padding:10px; box-shadow: 0 2px 8px rgba(0,0,0,0.1);">
        <div style="width:{svg_size}vmin; height:{svg_size}vmin;">
            {display_svg}
        </div>
    </div>
</div>
'''
components.html(html_content, height=700, scrolling=True)

col_svg, col_json = st.columns(2)
col_svg.download_button(
    "Download SVG",
    svg_string,
    file_name="lattice-pipes.svg",
    mime="image/svg+xml"
)
col_json.download_button(
    "Download JSON",
    json.dumps(layer.to_dict(), indent=2),
    file_name="lattice-pipes.json",
    mime="application/json"
)
