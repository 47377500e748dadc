"""Demo: 在控制台驱动网格（模拟 surface，不需要浏览器）"""

from pathlib import Path

from gridbrowser import config
from gridbrowser.grid import GridManager
from gridbrowser.render import GridRenderer
from gridbrowser.storage import KeyValueStore
from gridbrowser.surface import InMemorySurface
from gridbrowser.telemetry import configure_logging


def display_grid(manager: GridManager, renderer: GridRenderer):
    """显示网格预览与 pane 列表"""
    statuses = [c.status.value for c in manager.controllers]
    print(renderer.render_text(manager.layout, manager.collection.entries, statuses))
    print(f"设置: {manager.settings!r}")
    for controller in manager.controllers:
        target = f" → {controller.target_url}" if controller.target_url else ""
        print(f"  [{controller.index}] {controller.status.value:8} {controller.current_url or '-'}{target}")


def select_pane(manager: GridManager) -> int | None:
    """让用户选择一个 pane"""
    if not len(manager.collection):
        print("没有任何 pane")
        return None
    try:
        choice = int(input(f"请输入 pane 编号 (0-{len(manager.collection) - 1}): "))
    except ValueError:
        print("请输入有效的数字")
        return None
    if manager.get_pane(choice) is None:
        print("无效的编号")
        return None
    return choice


def settle_all(manager: GridManager) -> int:
    """完成所有进行中的模拟导航"""
    count = 0
    for controller in manager.controllers:
        if isinstance(controller.surface, InMemorySurface):
            count += controller.surface.settle()
    return count


def main_menu(manager: GridManager):
    """主菜单"""
    renderer = GridRenderer(width=90)
    while True:
        print("\n" + "=" * 40)
        print("  GridBrowser Demo")
        print("=" * 40)
        print("  [1] 新建窗口")
        print("  [2] 输入 URL")
        print("  [3] 完成所有加载")
        print("  [4] 后退 / [5] 前进")
        print("  [6] 关闭窗口")
        print("  [7] 设置列数 / 行数 / 缩放")
        print("  [8] 全部刷新")
        print("  [9] 全部关闭")
        print("  [0] 退出")
        print("=" * 40)

        choice = input("请选择功能: ").strip()

        if choice == "1":
            index = manager.open_new_window()
            print(f"已新建 pane #{index}")
        elif choice == "2":
            index = select_pane(manager)
            if index is not None:
                manager.submit(index, input("URL: "))
        elif choice == "3":
            print(f"完成 {settle_all(manager)} 个导航")
        elif choice in ("4", "5"):
            index = select_pane(manager)
            if index is not None:
                ok = manager.go_back(index) if choice == "4" else manager.go_forward(index)
                print("OK" if ok else "无法导航")
        elif choice == "6":
            index = select_pane(manager)
            if index is not None:
                manager.close_window_at(index)
        elif choice == "7":
            raw = input("columns rows zoom (如 3 2 70): ").split()
            try:
                columns, rows, zoom = (int(x) for x in raw)
            except ValueError:
                print("请输入三个数字")
                continue
            try:
                manager.update_settings(columns=columns, rows=rows, zoom=zoom)
            except ValueError as e:
                print(f"设置无效: {e}")
                continue
        elif choice == "8":
            print(f"刷新 {manager.reload_all_windows()} 个 pane")
        elif choice == "9":
            print(f"关闭 {manager.close_all_windows()} 个 pane")
        elif choice == "0":
            print("再见!")
            break
        else:
            print("无效选择，请重试")
            continue

        display_grid(manager, renderer)


def main(state_file: Path | None = None):
    """运行 demo"""
    configure_logging("WARNING")
    manager = GridManager(
        store=KeyValueStore(state_file or config.PERSIST_DIR / "demo.json"),
        surface_factory=InMemorySurface,
    )
    manager.load()
    main_menu(manager)


if __name__ == "__main__":
    main()
