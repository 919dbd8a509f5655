# ----------------
# Importations
# ----------------
import os
import tempfile

import streamlit as st

from huff_compressor.main import HuffException, compress_file, decompress_file, tree_to_dot
from huff_compressor.report import compression_timings, decompression_timings

# ------------------------
#   Streamlit App
# ------------------------
st.set_page_config(page_title="Huffman File Compressor", layout="centered")
st.title("Huffman File Compressor 🗃")

# ---------------------
#    Instructions
# ---------------------
st.subheader("1) Instructions")

st.markdown("""
*How to Use This File Compression Tool*

1. Upload a file using the button below.
2. Choose *Compress* for any file, *Decompress* for a `.huff` file.
3. Click *Process File* to start.
4. Download your file after processing.
""")
st.divider()

# -------------------
# file Uploading
# -------------------
st.subheader("2) File Uploader")
uploaded_file = st.file_uploader("Upload a file", type=None)
if uploaded_file:
    with tempfile.NamedTemporaryFile(delete=False) as tmp:
        tmp.write(uploaded_file.read())
        tmp_path = tmp.name
    st.success(f"Uploaded file: {uploaded_file.name} ({os.path.getsize(tmp_path)} bytes)")

    default_action = 1 if uploaded_file.name.endswith(".huff") else 0
    action = st.radio("**Choose Action**", ["Compress", "Decompress"], index=default_action)

    if st.button("Process File"):
        st.divider()
        out_suffix = ".huff" if action == "Compress" else "_restored"
        out_path = tmp_path + out_suffix
        try:
            with st.spinner(f"{action}ing file..."):
                # ------------------
                #  File Compression
                # ------------------
                if action == "Compress":
                    root, stats = compress_file(tmp_path, out_path)

                    st.subheader("3) Compression Summary")
                    col1, col2, col3 = st.columns(3)
                    space_saved = stats["space_saved_percent"]
                    ratio = stats["compression_ratio"]

                    col1.metric("**Original Size**", f"{stats['original_bytes']} bytes")
                    col2.metric("**Compressed Size**", f"{stats['compressed_bytes']} bytes")
                    if space_saved is None:
                        col3.metric("Space Saved", "N/A")
                    else:
                        col3.metric("Space Saved", f"{space_saved:.2f}%")

                    if ratio is None:
                        st.markdown("*Compression ratio: N/A (empty file)*")
                    else:
                        st.markdown(f"*Compression ratio: {ratio:.4f}*")
                    st.markdown(f"*Unique symbols: {stats['unique_symbols']}*")
                    st.markdown(f"*Header bits: {stats['header_bits']}*, "
                                f"*Payload bits: {stats['payload_bits']}*, "
                                f"*Padding bits: {stats['pad_count']}*")

                    st.divider()
                    st.subheader("4) Processing Timings")
                    st.table(compression_timings(stats))
                    st.divider()
                    st.subheader("5) Huffman Tree")
                    try:
                        st.graphviz_chart(tree_to_dot(root))
                    except Exception as e:
                        st.error(f"Could not render tree: {e}")

                # ----------------------
                # File Decompression
                # ---------------------
                else:
                    stats = decompress_file(tmp_path, out_path)
                    st.subheader("3) Decompression Report")
                    col1, col2, col3 = st.columns(3)
                    col1.metric("Compressed file size", f"{stats['compressed_size']} bytes")
                    col2.metric("Restored file size", f"{stats['restored_size']} bytes")
                    col3.metric("Header bits", f"{stats['header_bits']}")
                    st.divider()
                    st.subheader("4) Processing Timings")
                    st.table(decompression_timings(stats))

            if os.path.exists(out_path):
                with open(out_path, 'rb') as f:
                    # ------------------------
                    #   File Downloading
                    # ------------------------
                    st.divider()
                    st.subheader("Download Button")
                    st.info(f" Download your {action.lower()}ed file here.")
                    st.download_button(
                        label=f"{os.path.basename(out_path)}",
                        data=f.read(),
                        file_name=os.path.basename(out_path),
                        mime="application/octet-stream"
                    )
        except HuffException as e:
            # bad magic number, corrupt header or truncated payload
            st.error(f"Error: {e}")
        except Exception as e:
            st.error(f"Unexpected Error: {e}")
        finally:
            for path in (tmp_path, out_path):
                if os.path.exists(path):
                    os.remove(path)
