# NOTE: The viewer needs PyQt5.
#
# Installation (in terminal):
#   pip install PyQt5
import logging
import sys

from PyQt5.QtWidgets import (
    QApplication, QWidget, QVBoxLayout, QPushButton, QLabel,
    QFileDialog, QTextEdit, QHBoxLayout, QCheckBox
)
from PyQt5.QtGui import QFont, QFontDatabase

from ascii_renderer import RenderConfig, render
from bmp_parser import BMPError, BMPParser, describe
from utils import setup_logging, write_canvas

logger = logging.getLogger("bmp_ascii.viewer")


class AsciiViewer(QWidget):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("BMP to ASCII Viewer")
        self.resize(900, 700)

        # Parsed image and current rendering
        self.header = None
        self.pixel_data = None
        self.lines = []
        self.skip_rows = True

        layout = QVBoxLayout()

        top_layout = QHBoxLayout()

        # Button to open BMP file
        self.open_button = QPushButton("Open BMP File")
        self.open_button.setFixedSize(150, 50)
        self.open_button.clicked.connect(self.open_file)
        top_layout.addWidget(self.open_button)

        # Button to save the rendered art
        self.save_button = QPushButton("Save ASCII Art")
        self.save_button.setFixedSize(150, 50)
        self.save_button.setEnabled(False)
        self.save_button.clicked.connect(self.save_file)
        top_layout.addWidget(self.save_button)

        top_layout.addStretch()

        # Checkbox to keep every other row (compensates for tall terminal cells)
        self.skip_rows_box = QCheckBox("Skip alternate rows")
        self.skip_rows_box.setChecked(True)
        self.skip_rows_box.clicked.connect(self.toggle_skip_rows)
        top_layout.addWidget(self.skip_rows_box)

        layout.addLayout(top_layout)

        # Text area to display the ASCII art
        self.art_box = QTextEdit("No Image Loaded")
        self.art_box.setReadOnly(True)
        self.art_box.setLineWrapMode(QTextEdit.NoWrap)
        font = QFontDatabase.systemFont(QFontDatabase.FixedFont)
        font.setPointSize(4)
        font.setStyleHint(QFont.Monospace)
        self.art_box.setFont(font)
        layout.addWidget(QLabel("ASCII Art"))
        layout.addWidget(self.art_box)

        # Text box to display BMP metadata
        self.metadata_box = QTextEdit("No Metadata Loaded")
        self.metadata_box.setMinimumHeight(150)
        self.metadata_box.setReadOnly(True)
        layout.addWidget(self.metadata_box)

        self.setLayout(layout)

    # Open BMP file through a dialog
    def open_file(self):
        filepath, _ = QFileDialog.getOpenFileName(self, "Open BMP File", "", "BMP Files (*.bmp)")
        if not filepath:
            return
        self.load_file(filepath)

    # Load a BMP file and show its metadata and rendering
    def load_file(self, filepath):
        parser = BMPParser(filepath)
        try:
            parser.load()
        except BMPError as e:
            logger.warning("Cannot convert %s: %s", filepath, e)
            self._show_error(e, parser.header)
            return False
        except OSError as e:
            logger.warning("Cannot open %s: %s", filepath, e)
            self._show_error(e, None)
            return False

        self.metadata_box.setText(self._metadata_text(parser.metadata))
        self.header = parser.header
        self.pixel_data = parser.pixel_data
        self.update_art()
        return True

    # Render the loaded image with the current settings
    def update_art(self):
        if self.pixel_data is None:
            return

        config = RenderConfig(skip_alternate_rows=self.skip_rows)
        self.lines = render(self.header, self.pixel_data, config)
        self.art_box.setPlainText("".join(self.lines))
        self.save_button.setEnabled(True)

    # Toggle row skipping
    def toggle_skip_rows(self):
        self.skip_rows = self.skip_rows_box.isChecked()
        self.update_art()

    def save_file(self):
        if not self.lines:
            return

        output_filepath, _ = QFileDialog.getSaveFileName(self, "Save ASCII Art", "ascii_art_out.txt", "Text Files (*.txt)")
        if not output_filepath:
            return

        write_canvas(output_filepath, self.lines)
        self.metadata_box.append(f"Saved to {output_filepath}")

    def _show_error(self, error, header):
        # Forget the previous image so nothing stale can be saved
        self.header = None
        self.pixel_data = None
        self.lines = []
        self.save_button.setEnabled(False)
        self.art_box.setPlainText("")

        kind = getattr(error, "kind", type(error).__name__)
        text = f"Error: {kind}\n{error}\n"
        if header is not None:
            text += "\n" + self._metadata_text(describe(header))
        self.metadata_box.setText(text)

    @staticmethod
    def _metadata_text(metadata):
        meta_text = ""
        for k, v in metadata.items():
            meta_text += f"{k}: {v}\n"
        return meta_text


def main():
    setup_logging()
    app = QApplication(sys.argv)
    viewer = AsciiViewer()
    if len(sys.argv) > 1:
        viewer.load_file(sys.argv[1])
    viewer.show()
    return app.exec_()


if __name__ == "__main__":
    sys.exit(main())
