class Colors:
    """Color palette for the application UI."""

    BG_WHITE = "#ffffff"
    FG_BLACK = "#111111"
    FG_MUTED = "#555555"
    BORDER_LIGHT = "#d6d6d6"
    BORDER_MEDIUM = "#cdcdcd"
    HOVER_BG = "#f7f7f7"
    PRESSED_BG = "#eeeeee"
    DISABLED_BG = "#f1f1f1"
    DISABLED_FG = "#9a9a9a"

    BG_DARK = "#332f2a"
    FG_LIGHT = "#c8c1b7"
    BORDER_DARK = "#595148"

    SELECT_BG = "#6f7f94"


class Styles:
    """Reusable stylesheet templates."""

    @staticmethod
    def button():
        return f"""
            QPushButton {{
                background-color: {Colors.BG_WHITE};
                color: {Colors.FG_BLACK};
                border: 1px solid {Colors.BORDER_LIGHT};
                border-radius: 6px;
                padding: 6px 12px;
                outline: none;
            }}
            QPushButton:hover {{
                background-color: {Colors.HOVER_BG};
                border-color: {Colors.BORDER_MEDIUM};
            }}
            QPushButton:pressed {{
                background-color: {Colors.PRESSED_BG};
            }}
            QPushButton:focus {{
                outline: none;
                border: 1px solid {Colors.BORDER_LIGHT};
            }}
            QPushButton:disabled {{
                background-color: {Colors.DISABLED_BG};
                color: {Colors.DISABLED_FG};
            }}
        """

    @staticmethod
    def link_button():
        return f"""
            QPushButton {{
                background-color: transparent;
                color: {Colors.SELECT_BG};
                border: none;
                text-decoration: underline;
                padding: 2px;
                text-align: left;
            }}
        """

    @staticmethod
    def header():
        return f"""
            QLabel {{
                background-color: {Colors.BG_DARK};
                color: {Colors.FG_LIGHT};
                border: 1px solid {Colors.BORDER_DARK};
                border-radius: 6px;
                font-weight: bold;
                font-size: 14px;
                padding: 8px;
            }}
        """

    @staticmethod
    def info_label(color=Colors.FG_BLACK, bold=False):
        weight = "bold" if bold else "normal"
        return f"""
            QLabel {{
                color: {color};
                background-color: transparent;
                padding: 4px;
                font-size: 13px;
                font-weight: {weight};
                selection-background-color: transparent;
                selection-color: {color};
            }}
        """

    @staticmethod
    def slider():
        return f"""
            QSlider::groove:horizontal {{
                height: 6px;
                background-color: {Colors.BORDER_LIGHT};
                border-radius: 3px;
            }}
            QSlider::sub-page:horizontal {{
                background-color: {Colors.SELECT_BG};
                border-radius: 3px;
            }}
            QSlider::handle:horizontal {{
                width: 14px;
                margin: -5px 0;
                background-color: {Colors.BG_WHITE};
                border: 1px solid {Colors.BORDER_MEDIUM};
                border-radius: 7px;
            }}
            QSlider::sub-page:horizontal:disabled {{
                background-color: {Colors.DISABLED_FG};
            }}
        """

    @staticmethod
    def checkbox():
        return f"""
            QCheckBox {{
                color: {Colors.FG_BLACK};
                font-size: 13px;
                padding: 4px;
                outline: none;
            }}
            QCheckBox:disabled {{
                color: {Colors.DISABLED_FG};
            }}
        """
