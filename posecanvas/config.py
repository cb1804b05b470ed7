from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Pose Canvas API"
    env: str = "local"
    log_level: str = "INFO"

    canvas_background_color: str = "#ffffff"
    default_pen_color: str = "#00FF00"
    default_pen_size: int = 5

    outpaint_pad_color: str = "#000000"
    outpaint_seam_inset_px: int = 4

    mask_brush_size: int = 40
    mask_paint_color: tuple[int, int, int, int] = (255, 143, 171, 178)  # rgba(255,143,171,0.7)
    mask_red_threshold: int = 100

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()
