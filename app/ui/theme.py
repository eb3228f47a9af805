class Colors:
    """Color palette for the application UI."""

    BG_WHITE = "#ffffff"
    FG_BLACK = "#111111"
    BORDER_LIGHT = "#d6d6d6"
    BORDER_MEDIUM = "#cdcdcd"
    HOVER_BG = "#f7f7f7"
    PRESSED_BG = "#eeeeee"

    BG_DARK = "#2c2f33"
    BG_MEDIUM_DARK = "#363a40"
    FG_LIGHT = "#d3d6db"
    BORDER_DARK = "#4a4f57"

    SELECT_BG = "#4f7a5b"
    SELECT_FG = "#eef5ef"
    SELECT_BORDER = "#5f8f6c"


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
                padding: 6px 10px;
                text-align: left;
                outline: none;
            }}
            QPushButton:hover {{
                background-color: {Colors.HOVER_BG};
                border-color: {Colors.BORDER_MEDIUM};
            }}
            QPushButton:pressed {{
                background-color: {Colors.PRESSED_BG};
            }}
        """

    @staticmethod
    def selected_button():
        return f"""
            QPushButton {{
                font-weight: bold;
                background-color: {Colors.SELECT_BG};
                color: {Colors.SELECT_FG};
                border: 2px solid {Colors.SELECT_BORDER};
                border-radius: 6px;
                padding: 6px 10px;
                text-align: left;
                outline: none;
            }}
        """

    @staticmethod
    def info_label(color=Colors.FG_BLACK):
        return f"""
            QLabel {{
                color: {color};
                background-color: transparent;
                padding: 4px;
                font-size: 13px;
            }}
        """

    @staticmethod
    def section_title():
        return f"""
            QLabel {{
                color: {Colors.FG_LIGHT};
                background-color: {Colors.BG_DARK};
                border: 1px solid {Colors.BORDER_DARK};
                border-radius: 4px;
                font-weight: bold;
                padding: 4px 8px;
            }}
        """

    @staticmethod
    def assignment_list():
        return f"""
            QListWidget {{
                background-color: {Colors.BG_WHITE};
                border: 1px solid {Colors.BORDER_LIGHT};
                border-radius: 6px;
            }}
            QListWidget::item:selected {{
                background-color: {Colors.SELECT_BG};
                color: {Colors.SELECT_FG};
            }}
        """
